# dive_tracker/tours/validators.py
from __future__ import annotations

import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, List, Mapping, Optional, Union

from pydantic import ValidationError

from ..exceptions import InvalidParam, InvalidTourData
from .dto import TourCreate, TourFilters, TourUpdate
from .schema import (
    CLIENT_CONTACT,
    CLIENT_NAME,
    CLIENT_PAYMENT_STATUS,
    COMMISSION_TYPE,
    COMMISSION_TYPES,
    CONTACT_TYPE,
    CONTACT_TYPES,
    GUIDE_COMMISSION,
    GUIDE_NAME,
    GUIDE_PAYMENT_STATUS,
    PAYMENT_STATUSES,
    TOTAL_VALUE,
    TOUR_DATE,
)

# Etiquetas de campos para mensajes al usuario
FIELD_LABELS = {
    CLIENT_NAME: "Nome do cliente",
    CLIENT_CONTACT: "Contato",
    CONTACT_TYPE: "Tipo de contato",
    TOUR_DATE: "Data do passeio",
    GUIDE_NAME: "Nome do guia",
    TOTAL_VALUE: "Valor total",
    GUIDE_COMMISSION: "Comissão do guia",
    COMMISSION_TYPE: "Tipo de comissão",
    CLIENT_PAYMENT_STATUS: "Pagamento do cliente",
    GUIDE_PAYMENT_STATUS: "Pagamento do guia",
}

# "1.234" / "12.345.678": puntos como separador de miles pt-BR, sin parte decimal
_THOUSANDS_ONLY = re.compile(r"^-?\d{1,3}(\.\d{3})+$")


def parse_decimal(raw: Any) -> Decimal:
    """Acepta números o strings en formato pt-BR ('180,50', '1.234', '1.234,56').

    Sin coma, un punto seguido de exactamente tres dígitos es separador de miles;
    cualquier otro punto ('180.5') se lee como decimal.
    """
    if isinstance(raw, Decimal):
        return raw
    if isinstance(raw, (int, float)):
        return Decimal(str(raw))
    text = str(raw or "").strip().replace(" ", "")
    if "," in text:
        text = text.replace(".", "").replace(",", ".")
    elif _THOUSANDS_ONLY.match(text):
        text = text.replace(".", "")
    value = Decimal(text)
    if not value.is_finite():
        raise InvalidOperation(text)
    return value


def parse_date(raw: Any) -> date:
    if isinstance(raw, date):
        return raw
    return date.fromisoformat(str(raw or "").strip()[:10])


def validate_tour_form(form: Mapping[str, Any]) -> List[str]:
    """Valida el formulario crudo de alta; devuelve la lista de errores (vacía = OK)."""
    errors: List[str] = []
    for key in (CLIENT_NAME, CLIENT_CONTACT, GUIDE_NAME):
        if not str(form.get(key) or "").strip():
            errors.append(f"{FIELD_LABELS[key]} é obrigatório.")

    if form.get(CONTACT_TYPE) not in CONTACT_TYPES:
        errors.append("Tipo de contato deve ser whatsapp, phone ou email.")
    if form.get(COMMISSION_TYPE) not in COMMISSION_TYPES:
        errors.append("Tipo de comissão deve ser percentage ou fixed.")
    for key in (CLIENT_PAYMENT_STATUS, GUIDE_PAYMENT_STATUS):
        if form.get(key, "pending") not in PAYMENT_STATUSES:
            errors.append(f"{FIELD_LABELS[key]} deve ser paid ou pending.")

    for key in (TOTAL_VALUE, GUIDE_COMMISSION):
        try:
            if parse_decimal(form.get(key)) < 0:
                errors.append(f"{FIELD_LABELS[key]} não pode ser negativo.")
        except (InvalidOperation, ValueError):
            errors.append(f"{FIELD_LABELS[key]} deve ser numérico.")

    try:
        parse_date(form.get(TOUR_DATE))
    except (TypeError, ValueError):
        errors.append("Data do passeio deve ser uma data válida (AAAA-MM-DD).")
    return errors


def build_create_request(form: Mapping[str, Any]) -> TourCreate:
    """Formulario crudo -> TourCreate; lanza InvalidTourData con todos los errores."""
    errors = validate_tour_form(form)
    if errors:
        raise InvalidTourData(errors)
    return coerce_create({
        **form,
        TOTAL_VALUE: parse_decimal(form.get(TOTAL_VALUE)),
        GUIDE_COMMISSION: parse_decimal(form.get(GUIDE_COMMISSION)),
        TOUR_DATE: parse_date(form.get(TOUR_DATE)),
    })


def _messages(exc: ValidationError) -> List[str]:
    out: List[str] = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        label = FIELD_LABELS.get(loc, loc) if loc else "Dados"
        out.append(f"{label}: {err.get('msg', 'inválido')}")
    return out


def coerce_create(data: Union[TourCreate, Mapping[str, Any]]) -> TourCreate:
    if isinstance(data, TourCreate):
        return data
    try:
        return TourCreate.model_validate(dict(data))
    except ValidationError as exc:
        raise InvalidTourData(_messages(exc)) from exc


def coerce_update(changes: Union[TourUpdate, Mapping[str, Any]]) -> TourUpdate:
    if isinstance(changes, TourUpdate):
        return changes
    try:
        return TourUpdate.model_validate(dict(changes))
    except ValidationError as exc:
        raise InvalidTourData(_messages(exc)) from exc


def coerce_filters(criteria: Optional[Union[TourFilters, Mapping[str, Any]]]) -> TourFilters:
    if criteria is None:
        return TourFilters()
    if isinstance(criteria, TourFilters):
        return criteria
    try:
        return TourFilters.model_validate(dict(criteria))
    except ValidationError as exc:
        raise InvalidParam("; ".join(_messages(exc))) from exc


def validate_page_args(page: int, limit: int) -> None:
    if page < 1:
        raise InvalidParam("page deve ser >= 1.")
    if limit < 1:
        raise InvalidParam("limit deve ser >= 1.")
