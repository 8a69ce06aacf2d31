from decimal import Decimal
from typing import Optional
from urllib.parse import quote, urlencode

UPI_SCHEME = "upi"


def format_amount(amount) -> str:
    return str(Decimal(str(amount)).quantize(Decimal("0.01")))


def build_upi_link(
    payee_id: str,
    payee_name: str,
    amount,
    order_ref: str,
    note: Optional[str] = None,
    currency: str = "INR",
    scheme: str = UPI_SCHEME,
) -> str:
    """
    Deep link на оплату: scheme://pay?pa=..&pn=..&am=..&cu=..&tn=..&tr=..
    (payee, payee_name, amount, currency, note, ref). Оплата не проверяется.
    """
    params = {
        "pa": payee_id,
        "pn": payee_name,
        "am": format_amount(amount),
        "cu": currency,
        "tn": note or f"Order {order_ref}",
        "tr": order_ref,
    }
    return f"{scheme}://pay?{urlencode(params, quote_via=quote)}"
