from datetime import date
from html import escape

from quickstay.schemas.notifications import OutgoingEmail

CONFIRMATION_SUBJECT = "Hotel Booking Details"


def _format_amount(amount: float) -> str:
    return f"{amount:,.2f}"


def build_confirmation_email(
    *,
    to: str,
    username: str,
    booking_id: str,
    hotel_name: str,
    hotel_address: str,
    check_in: date,
    total_price: float,
    currency_symbol: str = "$",
) -> OutgoingEmail:
    amount = f"{currency_symbol} {_format_amount(total_price)}"
    html = (
        "<h2>Your Booking Details</h2>"
        f"<p>Dear {escape(username)},</p>"
        "<p>Thank you for your booking! Here are your booking details:</p>"
        "<ul>"
        f"<li><strong>Booking ID:</strong> {escape(booking_id)}</li>"
        f"<li><strong>Hotel Name:</strong> {escape(hotel_name)}</li>"
        f"<li><strong>Location:</strong> {escape(hotel_address)}</li>"
        f"<li><strong>Date:</strong> {check_in.isoformat()}</li>"
        f"<li><strong>Booking Amount:</strong> {escape(amount)}</li>"
        "</ul>"
        "<p>We look forward to welcoming you!</p>"
        "<p>If you need to make any changes, feel free to contact us.</p>"
    )
    text = "\n".join([
        f"Dear {username},",
        "Thank you for your booking! Here are your booking details:",
        f"Booking ID: {booking_id}",
        f"Hotel Name: {hotel_name}",
        f"Location: {hotel_address}",
        f"Date: {check_in.isoformat()}",
        f"Booking Amount: {amount}",
    ])
    return OutgoingEmail(to=to, subject=CONFIRMATION_SUBJECT, html=html, text=text)
