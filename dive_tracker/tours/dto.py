# dive_tracker/tours/dto.py
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StringConstraints, field_validator, model_validator

# —— Literales y tipos ——
ContactTypeLiteral = Literal["whatsapp", "phone", "email"]
CommissionTypeLiteral = Literal["percentage", "fixed"]
PaymentStatusLiteral = Literal["paid", "pending"]
StatusFilterLiteral = Literal["paid", "pending", "all"]
PaymentPartyLiteral = Literal["client", "guide"]

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Money = Annotated[Decimal, Field(ge=0)]


def _calendar_date(v: Any) -> Any:
    """El servidor puede devolver la fecha como timestamp ISO; solo nos quedamos con el día."""
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, str) and len(v) > 10 and v[4:5] == "-" and v[10:11] in ("T", " "):
        return v[:10]
    return v


class Tour(BaseModel):
    """Passeio de mergulho tal como lo devuelve la API."""
    model_config = ConfigDict(extra="ignore")

    tour_id: str = Field(validation_alias=AliasChoices("tour_id", "id", "_id"))
    client_name: str
    client_contact: str
    contact_type: ContactTypeLiteral
    tour_date: date
    guide_name: str
    total_value: Money
    guide_commission: Money
    commission_type: CommissionTypeLiteral
    client_payment_status: PaymentStatusLiteral
    guide_payment_status: PaymentStatusLiteral
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("tour_id", mode="before")
    @classmethod
    def _id_as_str(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @field_validator("tour_date", mode="before")
    @classmethod
    def _tour_date(cls, v: Any) -> Any:
        return _calendar_date(v)


class TourCreate(BaseModel):
    """Contrato de entrada para POST /api/tour (sin id ni timestamps)."""
    client_name: RequiredText
    client_contact: RequiredText
    contact_type: ContactTypeLiteral
    tour_date: date
    guide_name: RequiredText
    total_value: Money
    guide_commission: Money
    commission_type: CommissionTypeLiteral
    client_payment_status: PaymentStatusLiteral = "pending"
    guide_payment_status: PaymentStatusLiteral = "pending"

    @field_validator("tour_date", mode="before")
    @classmethod
    def _tour_date(cls, v: Any) -> Any:
        return _calendar_date(v)


class TourUpdate(BaseModel):
    """Actualización parcial: solo viajan los campos presentes (ver service.build_update_payload)."""
    client_name: Optional[RequiredText] = None
    client_contact: Optional[RequiredText] = None
    contact_type: Optional[ContactTypeLiteral] = None
    tour_date: Optional[date] = None
    guide_name: Optional[RequiredText] = None
    total_value: Optional[Money] = None
    guide_commission: Optional[Money] = None
    commission_type: Optional[CommissionTypeLiteral] = None
    client_payment_status: Optional[PaymentStatusLiteral] = None
    guide_payment_status: Optional[PaymentStatusLiteral] = None

    @field_validator("tour_date", mode="before")
    @classmethod
    def _tour_date(cls, v: Any) -> Any:
        return _calendar_date(v)


class TourFilters(BaseModel):
    """Criterios de filtro; se combinan con AND. 'all' = sin filtrar en ese eje."""
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    client_name: Optional[str] = None
    guide_name: Optional[str] = None
    search: Optional[str] = None
    client_payment_status: StatusFilterLiteral = "all"
    guide_payment_status: StatusFilterLiteral = "all"

    @field_validator("client_name", "guide_name", "search", mode="before")
    @classmethod
    def _blank_as_none(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            return v or None  # si queda vacío, tratar como None (sin filtro)
        return v

    @field_validator("date_from", "date_to", mode="before")
    @classmethod
    def _blank_date(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return _calendar_date(v)

    @model_validator(mode="after")
    def _check_range(self) -> "TourFilters":
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("date_from no puede ser mayor que date_to.")
        return self


class Pagination(BaseModel):
    """Metadatos de paginación; siempre autoritativos desde la API."""
    page: int = 1
    limit: int = 10
    total_count: int = Field(0, validation_alias=AliasChoices("totalCount", "total_count"))
    total_pages: int = Field(0, validation_alias=AliasChoices("totalPages", "total_pages"))
    has_next_page: bool = Field(False, validation_alias=AliasChoices("hasNextPage", "has_next_page"))
    has_prev_page: bool = Field(False, validation_alias=AliasChoices("hasPrevPage", "has_prev_page"))


class TourMetrics(BaseModel):
    """Agregados calculados por el servidor sobre todo el dataset (no sobre la página)."""
    total_count: int = Field(0, validation_alias=AliasChoices("totalCount", "total_count", "totalTours"))
    total_value: Decimal = Field(
        Decimal("0"), validation_alias=AliasChoices("totalValue", "total_value", "totalRevenue")
    )
    total_commission: Decimal = Field(
        Decimal("0"), validation_alias=AliasChoices("totalCommission", "total_commission", "totalCommissions")
    )
    pending_client_payments: int = Field(
        0, validation_alias=AliasChoices("pendingClientPayments", "pending_client_payments", "pendingPayments")
    )
    paid_tours: int = Field(0, validation_alias=AliasChoices("paidTours", "paid_tours"))
    pending_guide_payments: int = Field(
        0, validation_alias=AliasChoices("pendingGuidePayments", "pending_guide_payments")
    )


class ApiResponse(BaseModel):
    """Sobre genérico de respuesta para create/update/delete/get."""
    model_config = ConfigDict(extra="ignore")

    success: bool = False
    message: Optional[str] = None
    data: Any = None
    tour_id: Optional[str] = Field(None, validation_alias=AliasChoices("tour_id", "id"))

    @field_validator("tour_id", mode="before")
    @classmethod
    def _id_as_str(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v


class PaginatedResponse(BaseModel):
    """Página de passeios + paginación del servidor."""
    model_config = ConfigDict(extra="ignore")

    success: bool = True
    message: Optional[str] = None
    data: List[Tour] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)
    filtered_locally: bool = False

    @field_validator("data", mode="before")
    @classmethod
    def _none_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("pagination", mode="before")
    @classmethod
    def _none_pagination(cls, v: Any) -> Any:
        return {} if v is None else v


class GetAllDataResponse(PaginatedResponse):
    """Listado paginado + métricas globales en un solo payload."""
    metrics: TourMetrics = Field(default_factory=TourMetrics)

    @field_validator("metrics", mode="before")
    @classmethod
    def _none_metrics(cls, v: Any) -> Any:
        return {} if v is None else v
