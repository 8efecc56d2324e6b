from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENTS = Decimal("0.01")


def format_brl(amount: Decimal) -> str:
    """Format an amount as BRL string: Decimal('2850') -> 'R$ 2.850,00'"""
    formatted = f"{amount:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    return f"R$ {formatted}"


def parse_brl(text: str) -> Decimal | None:
    """Parse a BRL amount string into a two-decimal Decimal. Returns None on invalid input.

    Accepts formats like '55', '55.90', '1.055,90', '55,90'.
    """
    text = text.strip()
    if not text:
        return None
    if "," in text:
        text = text.replace(".", "").replace(",", ".")
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)
