# dive_tracker/tours/service.py
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date
from typing import Any, Dict, Iterator, Mapping, Optional, Union
from urllib.parse import quote

from ..api.transport import ApiTransport
from ..exceptions import ApiError, InvalidTourData, NotFound
from .dto import (
    ApiResponse,
    GetAllDataResponse,
    PaginatedResponse,
    Tour,
    TourCreate,
    TourFilters,
    TourUpdate,
)
from .filters import filter_tours
from .schema import DATE_RANGE_PATH, EDITABLE_FIELDS, GUIDE_PATH, TOUR_BASE_PATH
from .validators import coerce_create, coerce_filters, coerce_update, validate_page_args

logger = logging.getLogger(__name__)


def build_update_payload(update: TourUpdate) -> Dict[str, Any]:
    """Cuerpo del PUT con solo los campos presentes.

    Un campo ausente no viaja, ni siquiera como null: el servidor lo deja intacto.
    """
    payload: Dict[str, Any] = {}
    for field in EDITABLE_FIELDS:
        value = getattr(update, field)
        # 0 y "" son valores válidos; solo None significa "no tocar"
        if value is not None:
            payload[field] = value
    return payload


@contextmanager
def _api_call(default_message: str) -> Iterator[None]:
    """Deja pasar el ApiError (status/code intactos) completando el mensaje si vino vacío."""
    try:
        yield
    except ApiError as exc:
        if not exc.message:
            exc.message = default_message
            exc.args = (default_message,)
        logger.warning("%s: %s", default_message, exc.message)
        raise


class TourService:
    """Mapeo tipado de las operaciones de dominio a los endpoints REST de /api/tour."""

    base_path = TOUR_BASE_PATH

    def __init__(self, transport: ApiTransport) -> None:
        self._transport = transport

    # ------------------------------- CRUD -------------------------------------

    def create_tour(self, data: Union[TourCreate, Mapping[str, Any]]) -> ApiResponse:
        tour = coerce_create(data)
        with _api_call("Error creating tour"):
            body = self._transport.post(self.base_path, tour.model_dump())
        return ApiResponse.model_validate(body)

    def get_all_tours(self, page: int = 1, limit: int = 10) -> GetAllDataResponse:
        validate_page_args(page, limit)
        with _api_call("Error fetching tours"):
            body = self._transport.get(self.base_path, params={"page": page, "limit": limit})
        return GetAllDataResponse.model_validate(body)

    def get_tour_by_id(self, tour_id: str) -> Tour:
        with _api_call(f"Error fetching tour with ID {tour_id}"):
            body = self._transport.get(f"{self.base_path}/{quote(str(tour_id), safe='')}")
        envelope = ApiResponse.model_validate(body)
        if not envelope.data:
            raise NotFound(envelope.message or f"Tour {tour_id} not found", status=404, code="not_found")
        return Tour.model_validate(envelope.data)

    def update_tour(self, tour_id: str, changes: Union[TourUpdate, Mapping[str, Any]]) -> ApiResponse:
        payload = build_update_payload(coerce_update(changes))
        if not payload:
            raise InvalidTourData(["Nenhum campo para atualizar."])
        with _api_call(f"Error updating tour with ID {tour_id}"):
            body = self._transport.put(f"{self.base_path}/{quote(str(tour_id), safe='')}", payload)
        return ApiResponse.model_validate(body)

    def delete_tour(self, tour_id: str) -> ApiResponse:
        with _api_call(f"Error deleting tour with ID {tour_id}"):
            body = self._transport.delete(f"{self.base_path}/{quote(str(tour_id), safe='')}")
        return ApiResponse.model_validate(body)

    # --------------------------- Listados filtrados ---------------------------

    def get_tours_by_date_range(
        self, start_date: date, end_date: date, page: int = 1, limit: int = 10
    ) -> PaginatedResponse:
        validate_page_args(page, limit)
        params = {
            "startDate": start_date.isoformat(),
            "endDate": end_date.isoformat(),
            "page": page,
            "limit": limit,
        }
        with _api_call("Error fetching tours by date range"):
            body = self._transport.get(DATE_RANGE_PATH, params=params)
        return PaginatedResponse.model_validate(body)

    def get_tours_by_guide(self, guide_name: str, page: int = 1, limit: int = 10) -> PaginatedResponse:
        validate_page_args(page, limit)
        with _api_call(f"Error fetching tours for guide {guide_name}"):
            body = self._transport.get(
                f"{GUIDE_PATH}/{quote(guide_name, safe='')}", params={"page": page, "limit": limit}
            )
        return PaginatedResponse.model_validate(body)

    def get_tours_with_filters(
        self,
        filters: Optional[Union[TourFilters, Mapping[str, Any]]] = None,
        page: int = 1,
        limit: int = 10,
    ) -> PaginatedResponse:
        """Pide la página al endpoint más selectivo y aplica el resto de criterios en memoria.

        El filtrado local cubre solo la página traída; la paginación devuelta es la del
        servidor sin recalcular (ver DESIGN.md, brecha de precisión).
        """
        criteria = coerce_filters(filters)

        if criteria.date_from and criteria.date_to:
            result: PaginatedResponse = self.get_tours_by_date_range(
                criteria.date_from, criteria.date_to, page, limit
            )
            remaining = criteria.model_copy(update={"date_from": None, "date_to": None})
        elif criteria.guide_name:
            result = self.get_tours_by_guide(criteria.guide_name, page, limit)
            remaining = criteria.model_copy(update={"guide_name": None})
        else:
            result = self.get_all_tours(page, limit)
            remaining = criteria

        filtered = filter_tours(result.data, remaining)
        if len(filtered) != len(result.data):
            logger.debug("Filtro local: %s de %s passeios en la página %s", len(filtered), len(result.data), page)
        return PaginatedResponse(
            success=result.success,
            message=result.message,
            data=filtered,
            pagination=result.pagination,
            filtered_locally=len(filtered) != len(result.data),
        )
