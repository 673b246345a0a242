# dive_tracker/tours/commission.py
from __future__ import annotations

from decimal import Decimal
from typing import Union

from .dto import Tour, TourCreate

_HUNDRED = Decimal("100")


def calculate_commission_value(tour: Union[Tour, TourCreate]) -> Decimal:
    """Valor de comisión del guía, derivado (nunca almacenado).

    percentage -> total_value * guide_commission / 100
    fixed      -> guide_commission tal cual
    """
    if tour.commission_type == "percentage":
        return tour.total_value * tour.guide_commission / _HUNDRED
    return tour.guide_commission
