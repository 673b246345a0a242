# dive_tracker/tours/store.py
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, List, Mapping, Optional, Union

from ..config import AppConfig
from ..exceptions import InvalidParam, OperationFailed
from .commission import calculate_commission_value
from .dto import (
    ApiResponse,
    GetAllDataResponse,
    PaginatedResponse,
    Pagination,
    PaymentPartyLiteral,
    PaymentStatusLiteral,
    Tour,
    TourCreate,
    TourFilters,
    TourMetrics,
    TourUpdate,
)
from .filters import filter_tours
from .service import TourService
from .validators import coerce_filters

logger = logging.getLogger(__name__)


def _error_message(exc: BaseException, fallback: str) -> str:
    message = getattr(exc, "message", None) or str(exc)
    return message or fallback


class TourStore:
    """Fuente única de verdad de la UI: página actual, paginación y métricas.

    Cada mutación exitosa recarga página + métricas. Cada carga toma un número de
    generación; la respuesta de una carga superada por otra más nueva se descarta.
    """

    def __init__(self, service: TourService, config: Optional[AppConfig] = None) -> None:
        self._service = service
        self._cfg = config or AppConfig()
        self.tours: List[Tour] = []
        self.loading: bool = False
        self.error: Optional[str] = None
        self.page: int = 1
        self.limit: int = self._cfg.page_size
        self.pagination = Pagination(page=1, limit=self.limit)
        self.stats = TourMetrics()
        self.filtered_locally: bool = False
        self._generation = 0

    # ------------------------------- Estado -----------------------------------

    @property
    def status(self) -> str:
        if self.loading:
            return "loading"
        return "error" if self.error else "idle"

    def clear_error(self) -> None:
        self.error = None

    # ------------------------------- Cargas -----------------------------------

    def refresh(self) -> Optional[GetAllDataResponse]:
        """Recarga página actual + métricas. Los errores quedan en ``error``."""
        gen = self._begin()
        try:
            result = self._service.get_all_tours(self.page, self.limit)
        except Exception as exc:
            if self._is_current(gen):
                self.error = _error_message(exc, "Failed to load tours")
            logger.exception("Error cargando passeios (page=%s, limit=%s)", self.page, self.limit)
            return None
        finally:
            self._end(gen)

        if not self._is_current(gen):
            logger.info("Respuesta de la carga %s descartada (generación actual %s)", gen, self._generation)
            return result

        self._apply_page(result)
        self.stats = result.metrics

        # La página quedó fuera de rango (p. ej. se borró el último ítem de la última página)
        total_pages = result.pagination.total_pages
        if not result.data and 1 <= total_pages < self.page:
            self.page = total_pages
            return self.refresh()
        return result

    load_tours = refresh

    def load_tours_by_date_range(self, start_date: date, end_date: date, page: int = 1) -> PaginatedResponse:
        return self._load_filtered(
            lambda: self._service.get_tours_by_date_range(start_date, end_date, page, self.limit),
            page,
            "Failed to fetch tours by date range",
        )

    def load_tours_by_guide(self, guide_name: str, page: int = 1) -> PaginatedResponse:
        return self._load_filtered(
            lambda: self._service.get_tours_by_guide(guide_name, page, self.limit),
            page,
            "Failed to fetch tours by guide",
        )

    def load_tours_with_filters(
        self, filters: Union[TourFilters, Mapping[str, Any]], page: int = 1
    ) -> PaginatedResponse:
        return self._load_filtered(
            lambda: self._service.get_tours_with_filters(filters, page, self.limit),
            page,
            "Failed to fetch tours with filters",
        )

    def get_tour_by_id(self, tour_id: str) -> Tour:
        self.error = None
        try:
            return self._service.get_tour_by_id(tour_id)
        except Exception as exc:
            self.error = _error_message(exc, "Failed to fetch tour")
            logger.exception("Error obteniendo passeio %s", tour_id)
            raise

    # ------------------------------ Mutaciones --------------------------------

    def add_tour(self, data: Union[TourCreate, Mapping[str, Any]]) -> ApiResponse:
        return self._mutate("create", lambda: self._service.create_tour(data))

    def update_tour(self, tour_id: str, changes: Union[TourUpdate, Mapping[str, Any]]) -> ApiResponse:
        return self._mutate("update", lambda: self._service.update_tour(tour_id, changes))

    def delete_tour(self, tour_id: str) -> ApiResponse:
        return self._mutate("delete", lambda: self._service.delete_tour(tour_id))

    def set_payment_status(
        self, tour_id: str, party: PaymentPartyLiteral, status: PaymentStatusLiteral
    ) -> ApiResponse:
        """Toggle de un único estado de pago (cliente o guía)."""
        if party not in ("client", "guide"):
            raise InvalidParam(f"party inválido: {party}")
        return self.update_tour(tour_id, TourUpdate(**{f"{party}_payment_status": status}))

    # ------------------------------ Paginación --------------------------------

    def go_to_page(self, page: int) -> bool:
        """Solo aplica si 1 <= page <= total_pages; fuera de rango no hace nada.

        ``page`` solo avanza con una carga exitosa; si falla queda en ``error`` y
        el cursor sigue apuntando a la página que muestra ``tours``.
        """
        if not 1 <= page <= self.pagination.total_pages:
            return False
        previous = self.page
        self.page = page
        if self.refresh() is None:
            # carga fallida: el cursor vuelve a la página que sigue en pantalla
            self.page = previous
            return False
        return True

    def next_page(self) -> bool:
        if not self.pagination.has_next_page:
            return False
        return self.go_to_page(self.page + 1)

    def previous_page(self) -> bool:
        if not self.pagination.has_prev_page:
            return False
        return self.go_to_page(self.page - 1)

    def change_page_size(self, limit: int) -> None:
        if limit < 1:
            raise InvalidParam("limit deve ser >= 1.")
        previous = (self.page, self.limit)
        self.limit, self.page = limit, 1
        if self.refresh() is None:
            self.page, self.limit = previous

    # -------------------------------- Puras -----------------------------------

    def filter_tours(self, criteria: Union[TourFilters, Mapping[str, Any], None]) -> List[Tour]:
        """Refinamiento de visualización sobre la página ya cargada; no pide datos."""
        return filter_tours(self.tours, coerce_filters(criteria))

    calculate_commission_value = staticmethod(calculate_commission_value)

    # ------------------------------- Helpers ----------------------------------

    def _begin(self) -> int:
        self._generation += 1
        self.loading = True
        self.error = None
        return self._generation

    def _end(self, gen: int) -> None:
        if self._is_current(gen):
            self.loading = False

    def _is_current(self, gen: int) -> bool:
        return gen == self._generation

    def _apply_page(self, result: PaginatedResponse) -> None:
        self.tours = list(result.data)
        self.pagination = result.pagination
        self.filtered_locally = result.filtered_locally

    def _load_filtered(
        self, call: Callable[[], PaginatedResponse], page: int, fallback: str
    ) -> PaginatedResponse:
        gen = self._begin()
        try:
            result = call()
        except Exception as exc:
            if self._is_current(gen):
                self.error = _error_message(exc, fallback)
            logger.exception(fallback)
            raise
        finally:
            self._end(gen)
        if self._is_current(gen):
            self.page = page
            self._apply_page(result)
        return result

    def _mutate(self, action: str, call: Callable[[], ApiResponse]) -> ApiResponse:
        self.loading = True
        self.error = None
        try:
            response = call()
            if not response.success:
                raise OperationFailed(response.message or f"Failed to {action} tour")
            self.refresh()
            return response
        except Exception as exc:
            self.error = _error_message(exc, f"Failed to {action} tour")
            logger.exception("Error en %s de passeio", action)
            raise
        finally:
            self.loading = False
