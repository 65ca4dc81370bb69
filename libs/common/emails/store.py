"""
Store-related email templates.
"""

from decimal import Decimal

from libs.common.emails.core import send_email

_STATUS_MESSAGES = {
    "pending": "We have received your order and will start on it soon.",
    "processing": "Our florists are preparing your order.",
    "shipped": "Your order is on its way to you.",
    "delivered": "Your order has been delivered. We hope you love it!",
    "cancelled": "Your order has been cancelled. Any reserved items were released.",
}


def _wrap_html(title: str, inner: str) -> str:
    return f"""
<!DOCTYPE html>
<html>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <div style="background-color: #fdf2f8; padding: 20px; border-radius: 10px; margin-bottom: 20px;">
        <h1 style="color: #be185d; margin-top: 0;">{title}</h1>
    </div>
    <div style="background-color: #fff; padding: 20px; border-radius: 10px; border: 1px solid #e0e0e0;">
        {inner}
        <p style="margin-top: 30px;">Best regards,<br><strong>Buneko Blooms Team</strong></p>
    </div>
    <div style="text-align: center; margin-top: 20px; color: #666; font-size: 12px;">
        <p>This is an automated message. Please do not reply to this email.</p>
    </div>
</body>
</html>
"""


async def send_order_status_email(
    to_email: str,
    customer_name: str,
    order_id: int,
    status: str,
    total_amount: Decimal,
) -> bool:
    """
    Tell a customer their order moved to a new status.
    """
    message = _STATUS_MESSAGES.get(status, f"Your order status is now {status}.")
    subject = f"Order #{order_id} is {status} - Buneko Blooms"

    body = f"""Dear {customer_name},

{message}

Order #{order_id}
Status: {status}
Total: Rs. {total_amount:,.2f}

Thank you for shopping with Buneko Blooms!

Best regards,
Buneko Blooms Team
"""
    html_body = _wrap_html(
        f"Order #{order_id}: {status.capitalize()}",
        f"""<p>Dear {customer_name},</p>
        <p>{message}</p>
        <p><strong>Total:</strong> Rs. {total_amount:,.2f}</p>""",
    )

    return await send_email(to_email, subject, body, html_body)


async def send_account_status_email(
    to_email: str, customer_name: str, is_active: bool
) -> bool:
    """
    Tell a customer their account was deactivated or reactivated by an admin.
    """
    if is_active:
        subject = "Account Reactivated - Buneko Blooms"
        title = "Account Reactivated"
        message = (
            "Great news! Your account with Buneko Blooms has been reactivated. "
            "You can now sign in and continue shopping with us."
        )
    else:
        subject = "Account Deactivated - Buneko Blooms"
        title = "Account Deactivated"
        message = (
            "Your account with Buneko Blooms has been deactivated by our "
            "administration team. You will not be able to sign in or place "
            "orders until it is reactivated. If you believe this is an error, "
            "please contact our customer support team."
        )

    body = f"""Dear {customer_name},

{message}

Best regards,
Buneko Blooms Team
"""
    html_body = _wrap_html(
        title, f"<p>Dear {customer_name},</p>\n        <p>{message}</p>"
    )
    return await send_email(to_email, subject, body, html_body)
