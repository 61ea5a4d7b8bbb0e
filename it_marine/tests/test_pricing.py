import pytest

from it_marine.services import calculate_vat


def test_vat_inclusive():
    result = calculate_vat(3, 100, True)
    assert result.subtotal == 300
    assert result.grand_total == 300
    assert result.vat == pytest.approx(19.63, abs=0.01)
    assert result.to_dict() == {'subtotal': 300.0, 'vat': 19.63, 'grandTotal': 300.0}


def test_vat_exclusive():
    result = calculate_vat(3, 100, False)
    assert result.subtotal == 300
    assert result.vat == pytest.approx(21)
    assert result.grand_total == pytest.approx(321)
    assert result.total_price == 321.0


def test_empty_quantity_or_price():
    assert calculate_vat(0, 100, False).total_price == 0
    assert calculate_vat(None, None, True).total_price == 0
