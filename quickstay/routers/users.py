from fastapi import APIRouter

from quickstay.dependencies import CurrentUserDep, UserServiceDep
from quickstay.schemas.requests import RecentSearchRequest
from quickstay.schemas.responses import ApiResponse, UserDataResponse

router = APIRouter(prefix="/api/user", tags=["users"])


@router.get("", response_model=UserDataResponse, response_model_exclude_none=True)
async def get_user_data(user: CurrentUserDep) -> UserDataResponse:
    return UserDataResponse(
        role=user.role,
        recent_searched_cities=user.recent_searched_cities or [],
    )


@router.post(
    "/store-recent-search", response_model=ApiResponse, response_model_exclude_none=True,
)
async def store_recent_search(
    body: RecentSearchRequest, user: CurrentUserDep, service: UserServiceDep,
) -> ApiResponse:
    await service.store_recent_search(user.id, body.recent_searched_city)
    return ApiResponse(message="City added")
