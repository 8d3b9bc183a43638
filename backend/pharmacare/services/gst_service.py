"""GST arithmetic for sale lines and invoices. Pure functions, integer paise in and out.

Intra-state sales split the slab rate into equal CGST and SGST halves:

    taxable = unit_price * quantity - discount
    cgst    = round(taxable * (rate / 2) / 100)
    sgst    = round(taxable * (rate / 2) / 100)
    total   = taxable + cgst + sgst

Each half is rounded on its own to the nearest paisa, halves away from zero
(ROUND_HALF_UP). Arithmetic is Decimal throughout, never float.
"""
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Union

from pharmacare.core.exceptions import ValidationError

Rate = Union[Decimal, int, str]

_HUNDRED = Decimal("100")
_TWO = Decimal("2")


@dataclass(frozen=True)
class LineCalculation:
    unit_price_paise: int
    quantity: int
    discount_paise: int
    taxable_amount_paise: int
    cgst_rate: Decimal
    cgst_amount_paise: int
    sgst_rate: Decimal
    sgst_amount_paise: int
    total_paise: int

    @property
    def line_subtotal_paise(self) -> int:
        return self.unit_price_paise * self.quantity

    @property
    def total_gst_paise(self) -> int:
        return self.cgst_amount_paise + self.sgst_amount_paise


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal_paise: int
    discount_paise: int
    total_cgst_paise: int
    total_sgst_paise: int
    total_gst_paise: int
    grand_total_paise: int


def round_paise(value: Decimal) -> int:
    """Nearest integer paisa, halves away from zero."""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _as_rate(rate: Rate) -> Decimal:
    if isinstance(rate, float):
        # floats would leak binary rounding into tax amounts
        raise ValidationError("GST rate must be a Decimal, int or string, not float")
    value = rate if isinstance(rate, Decimal) else Decimal(str(rate))
    if not value.is_finite() or value < 0 or value > _HUNDRED:
        raise ValidationError(f"GST rate must be between 0 and 100, got {rate}")
    return value


def _require_int(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer, got {value!r}")


def split_rate(rate: Rate) -> Decimal:
    """CGST (and SGST) rate: half the slab rate."""
    return _as_rate(rate) / _TWO


def calculate_half_tax(taxable_amount_paise: int, half_rate: Decimal) -> int:
    return round_paise(Decimal(taxable_amount_paise) * half_rate / _HUNDRED)


def calculate_line(
    unit_price_paise: int,
    quantity: int,
    gst_rate: Rate,
    discount_paise: int = 0,
) -> LineCalculation:
    """
    Tax breakdown for one sale line.

    Example (5% slab, 10 units at 900 paise, no discount):
        taxable 9000, cgst 225 (2.5%), sgst 225 (2.5%), total 9450
    """
    _require_int("unit_price_paise", unit_price_paise)
    _require_int("quantity", quantity)
    _require_int("discount_paise", discount_paise)
    if quantity <= 0:
        raise ValidationError(f"Quantity must be positive, got {quantity}")
    if unit_price_paise <= 0:
        raise ValidationError(f"Unit price must be positive, got {unit_price_paise}")
    if discount_paise < 0:
        raise ValidationError(f"Discount cannot be negative, got {discount_paise}")

    line_subtotal = unit_price_paise * quantity
    if discount_paise > line_subtotal:
        raise ValidationError(
            f"Discount {discount_paise} exceeds line value {line_subtotal}"
        )

    half_rate = split_rate(gst_rate)
    taxable = line_subtotal - discount_paise
    cgst = calculate_half_tax(taxable, half_rate)
    sgst = calculate_half_tax(taxable, half_rate)

    return LineCalculation(
        unit_price_paise=unit_price_paise,
        quantity=quantity,
        discount_paise=discount_paise,
        taxable_amount_paise=taxable,
        cgst_rate=half_rate,
        cgst_amount_paise=cgst,
        sgst_rate=half_rate,
        sgst_amount_paise=sgst,
        total_paise=taxable + cgst + sgst,
    )


def calculate_invoice_totals(lines: Iterable[LineCalculation]) -> InvoiceTotals:
    lines = list(lines)
    subtotal = sum(line.line_subtotal_paise for line in lines)
    discount = sum(line.discount_paise for line in lines)
    cgst = sum(line.cgst_amount_paise for line in lines)
    sgst = sum(line.sgst_amount_paise for line in lines)
    total_gst = cgst + sgst

    return InvoiceTotals(
        subtotal_paise=subtotal,
        discount_paise=discount,
        total_cgst_paise=cgst,
        total_sgst_paise=sgst,
        total_gst_paise=total_gst,
        grand_total_paise=subtotal - discount + total_gst,
    )


def verify_totals(totals: InvoiceTotals, lines: List[LineCalculation]) -> None:
    """Raise ValidationError unless the invoice totals and its lines agree exactly."""
    if totals.total_gst_paise != totals.total_cgst_paise + totals.total_sgst_paise:
        raise ValidationError(
            f"GST total {totals.total_gst_paise} != CGST {totals.total_cgst_paise} "
            f"+ SGST {totals.total_sgst_paise}"
        )
    expected = totals.subtotal_paise - totals.discount_paise + totals.total_gst_paise
    if totals.grand_total_paise != expected:
        raise ValidationError(
            f"Grand total {totals.grand_total_paise} != subtotal - discount + GST ({expected})"
        )
    line_sum = sum(line.total_paise for line in lines)
    if line_sum != totals.grand_total_paise:
        raise ValidationError(
            f"Grand total {totals.grand_total_paise} != sum of line totals ({line_sum})"
        )
    for line in lines:
        if line.taxable_amount_paise != line.line_subtotal_paise - line.discount_paise:
            raise ValidationError("Line taxable amount does not match price, quantity and discount")
        if line.total_paise != line.taxable_amount_paise + line.total_gst_paise:
            raise ValidationError("Line total does not match taxable amount plus GST")
