"""Customer-facing rendering of how an order was paid."""

BRAND_NAMES = {
    "visa": "Visa",
    "mastercard": "Mastercard",
    "amex": "American Express",
    "discover": "Discover",
    "diners": "Diners Club",
    "jcb": "JCB",
    "unionpay": "UnionPay",
}

METHOD_NAMES = {
    "card": "Credit card",
    "paypal": "PayPal",
    "ideal": "iDEAL",
    "bancontact": "Bancontact",
    "sepa_debit": "SEPA Direct Debit",
    "klarna": "Klarna",
}

DEFAULT_METHOD_NAME = "Credit card"


def format_payment_method(details) -> str:
    """Render a payment descriptor, e.g. ``"Visa ****4242"``.

    Accepts a PaymentDetails value object, a mapping with the same keys, or
    None. Unknown brands are title-cased; without brand or method the
    generic "Credit card" label is returned.
    """
    if details is None:
        return DEFAULT_METHOD_NAME

    if isinstance(details, dict):
        method, brand, last4 = details.get("method"), details.get("brand"), details.get("last4")
    else:
        method, brand, last4 = details.method, details.brand, details.last4

    if brand:
        name = BRAND_NAMES.get(brand.lower(), brand.title())
        return f"{name} ****{last4}" if last4 else name

    if method and method.lower() != "card":
        return METHOD_NAMES.get(method.lower(), method.replace("_", " ").title())

    return f"{DEFAULT_METHOD_NAME} ****{last4}" if last4 else DEFAULT_METHOD_NAME
