"""Server-rendered result pages for the payment form."""
from html import escape

BUTTON_STYLE = (
    "display: inline-block; margin-top: 20px; padding: 10px 20px; "
    "background-color: #007bff; color: white; text-decoration: none; border-radius: 4px;"
)


def render_success(customer_message: str) -> str:
    return f"""
      <div style="text-align: center; margin-top: 50px;">
        <h2>Payment Request Sent!</h2>
        <p>{escape(customer_message or "")}</p>
        <p>Check your phone to complete the payment.</p>
        <a href="/" style="{BUTTON_STYLE}">Back to Payment</a>
      </div>
    """


def render_error(message: str, title: str = "Error Processing Payment") -> str:
    return f"""
      <div style="text-align: center; margin-top: 50px;">
        <h2 style="color: red;">{escape(title)}</h2>
        <p>{escape(message or "")}</p>
        <a href="/" style="{BUTTON_STYLE}">Try Again</a>
      </div>
    """
