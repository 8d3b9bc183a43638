"""Rupee/paise conversion and invoice formatting (Indian digit grouping)."""
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from pharmacare.core.exceptions import ValidationError

_ONES = [
    "", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
    "Seventeen", "Eighteen", "Nineteen",
]
_TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]


def rupees_to_paise(rupees: str) -> int:
    """
    Parse a rupee amount typed by an operator, e.g. "100.50" -> 10050.

    Raises ValidationError for anything that is not a non-negative amount
    with at most two decimals; nothing is rounded silently.
    """
    text = (rupees or "").strip().replace(",", "")
    try:
        value = Decimal(text)
    except InvalidOperation:
        raise ValidationError(f"Invalid amount: {rupees!r}")
    if not value.is_finite() or value < 0:
        raise ValidationError(f"Invalid amount: {rupees!r}")
    paise = value * 100
    if paise != paise.to_integral_value():
        raise ValidationError(f"Amount has more than two decimals: {rupees!r}")
    return int(paise)


def paise_to_rupees(paise: int) -> Decimal:
    return (Decimal(paise) / 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def paise_to_rupees_string(paise: int) -> str:
    """10050 -> "100.50" """
    return f"{paise_to_rupees(paise):.2f}"


def _group_indian(digits: str) -> str:
    # last three digits, then pairs: 1,23,45,678
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_paise(paise: int) -> str:
    """12345678950 -> "₹12,34,56,789.50" """
    sign = "-" if paise < 0 else ""
    rupees, rest = divmod(abs(paise), 100)
    return f"{sign}₹{_group_indian(str(rupees))}.{rest:02d}"


def _two_digit_words(n: int) -> str:
    if n < 20:
        return _ONES[n]
    tens, ones = divmod(n, 10)
    return _TENS[tens] + (" " + _ONES[ones] if ones else "")


def _three_digit_words(n: int) -> str:
    hundreds, rest = divmod(n, 100)
    words = _ONES[hundreds] + " Hundred" if hundreds else ""
    if rest:
        words += (" " if words else "") + _two_digit_words(rest)
    return words


def _indian_words(n: int) -> str:
    parts = []
    crores, rest = divmod(n, 10_000_000)
    if crores:
        # 100 crore and up: the crore count is itself spelt in lakhs/thousands
        parts.append(_indian_words(crores) + " Crore")
    lakhs, rest = divmod(rest, 100_000)
    if lakhs:
        parts.append(_two_digit_words(lakhs) + " Lakh")
    thousands, rest = divmod(rest, 1000)
    if thousands:
        parts.append(_two_digit_words(thousands) + " Thousand")
    if rest:
        parts.append(_three_digit_words(rest))
    return " ".join(parts)


def paise_to_words(paise: int) -> str:
    """
    Amount in words for printed invoices, Indian numbering (Crore, Lakh, Thousand).

    14850 -> "One Hundred Forty Eight Rupees and Fifty Paise Only"
    """
    if paise < 0:
        raise ValidationError("Amount in words needs a non-negative amount")
    if paise == 0:
        return "Zero Rupees Only"

    rupees, paise_part = divmod(paise, 100)

    rupee_words = ""
    if rupees:
        rupee_words = _indian_words(rupees) + (" Rupee" if rupees == 1 else " Rupees")

    paise_words = _two_digit_words(paise_part) + " Paise" if paise_part else ""

    if rupee_words and paise_words:
        return f"{rupee_words} and {paise_words} Only"
    return f"{rupee_words or paise_words} Only"
