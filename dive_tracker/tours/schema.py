# dive_tracker/tours/schema.py
from __future__ import annotations

from typing import Final, List, Tuple

# Nombres canónicos de campos (evita strings sueltos en el resto del código)
TOUR_ID: Final[str] = "tour_id"
CLIENT_NAME: Final[str] = "client_name"
CLIENT_CONTACT: Final[str] = "client_contact"
CONTACT_TYPE: Final[str] = "contact_type"
TOUR_DATE: Final[str] = "tour_date"
GUIDE_NAME: Final[str] = "guide_name"
TOTAL_VALUE: Final[str] = "total_value"
GUIDE_COMMISSION: Final[str] = "guide_commission"
COMMISSION_TYPE: Final[str] = "commission_type"
CLIENT_PAYMENT_STATUS: Final[str] = "client_payment_status"
GUIDE_PAYMENT_STATUS: Final[str] = "guide_payment_status"

# Campos editables (todo menos id y timestamps, que asigna el servidor)
EDITABLE_FIELDS: Final[List[str]] = [
    CLIENT_NAME,
    CLIENT_CONTACT,
    CONTACT_TYPE,
    TOUR_DATE,
    GUIDE_NAME,
    TOTAL_VALUE,
    GUIDE_COMMISSION,
    COMMISSION_TYPE,
    CLIENT_PAYMENT_STATUS,
    GUIDE_PAYMENT_STATUS,
]

# Valores enumerados
CONTACT_TYPES: Final[Tuple[str, ...]] = ("whatsapp", "phone", "email")
COMMISSION_TYPES: Final[Tuple[str, ...]] = ("percentage", "fixed")
PAYMENT_STATUSES: Final[Tuple[str, ...]] = ("paid", "pending")
STATUS_FILTER_ALL: Final[str] = "all"

# Endpoints REST
TOUR_BASE_PATH: Final[str] = "/api/tour"
DATE_RANGE_PATH: Final[str] = f"{TOUR_BASE_PATH}/date-range"
GUIDE_PATH: Final[str] = f"{TOUR_BASE_PATH}/guide"
