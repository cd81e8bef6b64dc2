"""
Price parsing and formatting (Brazilian real, "R$ 1.234,56")
"""
import re
from typing import Optional, Union

_CURRENCY_CHARS = re.compile(r"[R$\s]")


def parse_price(value: Union[str, int, float, None]) -> Optional[float]:
    """
    Convert a product price sent by the admin form into a number.

    Numbers pass through untouched. Strings drop "R$" and whitespace, lose the
    first thousands dot and use the comma as decimal separator, so
    "R$ 1.234,56" -> 1234.56. Returns None for booleans and for strings that
    are not a number.
    """
    if isinstance(value, bool):
        return None
    if value is None or isinstance(value, (int, float)):
        return value

    numeric = _CURRENCY_CHARS.sub("", value).replace(".", "", 1).replace(",", ".", 1)
    try:
        return float(numeric)
    except ValueError:
        return None


def parse_price_to_cents(price: str) -> int:
    """
    Convert a formatted price into cents.

    Strings without a separator are taken as cents already ("500" -> 500).
    Anything unparseable yields 0.
    """
    if not price:
        return 0

    clean = _CURRENCY_CHARS.sub("", price)

    if "," not in clean and "." not in clean:
        try:
            return int(clean)
        except ValueError:
            return 0

    if "," in clean and "." in clean:
        # "1.234,56": dots group thousands
        clean = clean.replace(".", "")

    try:
        return round(float(clean.replace(",", ".", 1)) * 100)
    except ValueError:
        return 0


def format_price_from_cents(cents: int) -> str:
    """Format cents as "R$ 1.234,56" """
    reais, centavos = divmod(int(cents), 100)
    thousands = f"{reais:,}".replace(",", ".")
    return f"R$ {thousands},{centavos:02d}"


def format_brl(amount: float) -> str:
    """Format a float amount as "R$ 12,50" (no thousands separator)"""
    return f"R$ {amount:.2f}".replace(".", ",")
