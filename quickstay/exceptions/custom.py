class BookingError(Exception):
    """Request-level failure reported to the client as ``success: false``."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidRequestError(BookingError):
    pass


class NotFoundError(BookingError):
    pass


class ConflictError(BookingError):
    pass


class RoomUnavailableError(ConflictError):
    def __init__(self, room_id: str):
        self.room_id = room_id
        super().__init__("Room not available")


class AuthenticationError(Exception):
    def __init__(self, message: str = "not authenticated"):
        self.message = message
        super().__init__(message)


class PermissionDeniedError(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class WebhookError(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class IdentityProviderError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class PaymentGatewayError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)
