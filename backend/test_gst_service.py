from decimal import Decimal

import pytest

from pharmacare.core.exceptions import ValidationError
from pharmacare.services import gst_service


def test_five_percent_line():
    line = gst_service.calculate_line(900, 10, Decimal("5"))
    assert line.taxable_amount_paise == 9000
    assert line.cgst_rate == Decimal("2.5")
    assert line.cgst_amount_paise == 225
    assert line.sgst_amount_paise == 225
    assert line.total_gst_paise == 450
    assert line.total_paise == 9450


def test_discount_comes_off_before_tax():
    line = gst_service.calculate_line(1000, 2, 12, discount_paise=200)
    assert line.line_subtotal_paise == 2000
    assert line.taxable_amount_paise == 1800
    assert line.cgst_amount_paise == 108
    assert line.total_paise == 1800 + 108 + 108


def test_halves_round_away_from_zero():
    # 100 * 2.5% = 2.5 paise per half
    line = gst_service.calculate_line(100, 1, "5")
    assert line.cgst_amount_paise == 3
    assert line.sgst_amount_paise == 3
    assert line.total_paise == 106


def test_each_half_rounded_independently():
    # 33 * 9% = 2.97 -> 3 per half, not round(5.94) = 6 split
    line = gst_service.calculate_line(33, 1, 18)
    assert line.cgst_amount_paise == 3
    assert line.sgst_amount_paise == 3


def test_zero_rated_line():
    line = gst_service.calculate_line(500, 3, 0)
    assert line.total_gst_paise == 0
    assert line.total_paise == 1500


def test_float_rate_rejected():
    with pytest.raises(ValidationError):
        gst_service.calculate_line(900, 1, 5.0)


@pytest.mark.parametrize("price, qty, discount", [
    (900, 0, 0),
    (900, -1, 0),
    (0, 1, 0),
    (900, 1, -5),
    (900, 1, 901),
])
def test_invalid_line_rejected(price, qty, discount):
    with pytest.raises(ValidationError):
        gst_service.calculate_line(price, qty, 5, discount_paise=discount)


def test_rate_out_of_range_rejected():
    with pytest.raises(ValidationError):
        gst_service.split_rate(Decimal("101"))


def test_invoice_totals_add_up():
    lines = [
        gst_service.calculate_line(900, 10, 5),
        gst_service.calculate_line(1000, 2, 12, discount_paise=200),
    ]
    totals = gst_service.calculate_invoice_totals(lines)
    assert totals.subtotal_paise == 11000
    assert totals.discount_paise == 200
    assert totals.total_cgst_paise == 225 + 108
    assert totals.total_gst_paise == totals.total_cgst_paise + totals.total_sgst_paise
    assert totals.grand_total_paise == 11000 - 200 + totals.total_gst_paise
    assert totals.grand_total_paise == sum(line.total_paise for line in lines)
    gst_service.verify_totals(totals, lines)


def test_verify_totals_catches_tampering():
    lines = [gst_service.calculate_line(900, 10, 5)]
    totals = gst_service.calculate_invoice_totals(lines)
    bad = gst_service.InvoiceTotals(
        subtotal_paise=totals.subtotal_paise,
        discount_paise=totals.discount_paise,
        total_cgst_paise=totals.total_cgst_paise,
        total_sgst_paise=totals.total_sgst_paise,
        total_gst_paise=totals.total_gst_paise,
        grand_total_paise=totals.grand_total_paise + 1,
    )
    with pytest.raises(ValidationError):
        gst_service.verify_totals(bad, lines)
