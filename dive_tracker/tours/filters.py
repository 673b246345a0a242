# dive_tracker/tours/filters.py
from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional

from .dto import StatusFilterLiteral, Tour, TourFilters
from .schema import CLIENT_PAYMENT_STATUS, GUIDE_PAYMENT_STATUS, STATUS_FILTER_ALL


def _contains(haystack: str, needle: str) -> bool:
    return needle.lower() in haystack.lower()


def apply_date_filter(tours: Iterable[Tour], date_from: Optional[date], date_to: Optional[date]) -> List[Tour]:
    out = list(tours)
    if date_from is not None:
        out = [t for t in out if t.tour_date >= date_from]
    if date_to is not None:
        out = [t for t in out if t.tour_date <= date_to]
    return out


def apply_client_name_filter(tours: Iterable[Tour], client_name: Optional[str]) -> List[Tour]:
    if not client_name:
        return list(tours)
    return [t for t in tours if _contains(t.client_name, client_name)]


def apply_guide_name_filter(tours: Iterable[Tour], guide_name: Optional[str]) -> List[Tour]:
    if not guide_name:
        return list(tours)
    return [t for t in tours if _contains(t.guide_name, guide_name)]


def apply_status_filter(tours: Iterable[Tour], field: str, status: Optional[StatusFilterLiteral]) -> List[Tour]:
    if not status or status == STATUS_FILTER_ALL:
        return list(tours)
    return [t for t in tours if getattr(t, field) == status]


def apply_search_filter(tours: Iterable[Tour], search: Optional[str]) -> List[Tour]:
    """Texto libre: coincide con nombre del cliente, contacto o nombre del guía."""
    if not search:
        return list(tours)
    return [
        t for t in tours
        if _contains(t.client_name, search) or _contains(t.client_contact, search) or _contains(t.guide_name, search)
    ]


def filter_tours(tours: Iterable[Tour], criteria: TourFilters) -> List[Tour]:
    """Filtro puro en memoria; todos los criterios se combinan con AND."""
    out = apply_date_filter(tours, criteria.date_from, criteria.date_to)
    out = apply_client_name_filter(out, criteria.client_name)
    out = apply_guide_name_filter(out, criteria.guide_name)
    out = apply_status_filter(out, CLIENT_PAYMENT_STATUS, criteria.client_payment_status)
    out = apply_status_filter(out, GUIDE_PAYMENT_STATUS, criteria.guide_payment_status)
    return apply_search_filter(out, criteria.search)
