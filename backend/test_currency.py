from decimal import Decimal

import pytest

from pharmacare.core.exceptions import ValidationError
from pharmacare.services.currency import (
    format_paise,
    paise_to_rupees,
    paise_to_rupees_string,
    paise_to_words,
    rupees_to_paise,
)


def test_rupees_to_paise():
    assert rupees_to_paise("100.50") == 10050
    assert rupees_to_paise("9") == 900
    assert rupees_to_paise(" 1,250.5 ") == 125050
    assert rupees_to_paise("0") == 0


@pytest.mark.parametrize("text", ["", "abc", "-5", "1.005", "NaN"])
def test_rupees_to_paise_rejects_bad_input(text):
    with pytest.raises(ValidationError):
        rupees_to_paise(text)


def test_paise_to_rupees():
    assert paise_to_rupees(10050) == Decimal("100.50")
    assert paise_to_rupees_string(5) == "0.05"


def test_indian_grouping():
    assert format_paise(0) == "₹0.00"
    assert format_paise(94500) == "₹945.00"
    assert format_paise(12345678950) == "₹12,34,56,789.50"
    assert format_paise(-150000) == "-₹1,500.00"


def test_amount_in_words():
    assert paise_to_words(0) == "Zero Rupees Only"
    assert paise_to_words(100) == "One Rupee Only"
    assert paise_to_words(50) == "Fifty Paise Only"
    assert paise_to_words(14850) == "One Hundred Forty Eight Rupees and Fifty Paise Only"
    assert paise_to_words(945000) == "Nine Thousand Four Hundred Fifty Rupees Only"


def test_amount_in_words_lakhs_and_crores():
    assert paise_to_words(150000000) == "Fifteen Lakh Rupees Only"
    assert paise_to_words(2_05_00_000_00) == "Two Crore Five Lakh Rupees Only"


def test_negative_amount_in_words_rejected():
    with pytest.raises(ValidationError):
        paise_to_words(-1)
