# ==============================================================================
# PRICING - VAT for purchase tickets
# ==============================================================================
# Thai VAT is 7%.
#
#   subtotal = quantity * unit_price
#   VAT inclusive:  grand_total = subtotal
#                   vat         = subtotal - subtotal / 1.07
#   VAT exclusive:  vat         = subtotal * 0.07
#                   grand_total = subtotal + vat
#
# The grand total is what gets stored as the ticket's totalPrice. It is
# computed when the ticket is submitted or edited, never later from the
# stored quantity/price.
# ==============================================================================

from dataclasses import dataclass
from typing import Any, Dict

VAT_RATE = 0.07


@dataclass(frozen=True)
class VatBreakdown:
    subtotal: float
    vat: float
    grand_total: float

    @property
    def total_price(self) -> float:
        """Grand total rounded to satang, as persisted."""
        return round(self.grand_total, 2)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'subtotal': round(self.subtotal, 2),
            'vat': round(self.vat, 2),
            'grandTotal': self.total_price,
        }


def calculate_vat(quantity: float, unit_price: float, is_vat_inclusive: bool) -> VatBreakdown:
    """
    Splits quantity * unit_price into subtotal, VAT and grand total.

    Args:
        quantity: Number of units
        unit_price: Price per unit
        is_vat_inclusive: True when unit_price already includes VAT

    Returns:
        VatBreakdown (unrounded; use total_price for the stored value)
    """
    subtotal = float(quantity or 0) * float(unit_price or 0)
    if is_vat_inclusive:
        grand_total = subtotal
        vat = subtotal - subtotal / (1 + VAT_RATE)
    else:
        vat = subtotal * VAT_RATE
        grand_total = subtotal + vat
    return VatBreakdown(subtotal=subtotal, vat=vat, grand_total=grand_total)
