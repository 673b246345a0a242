# dive_tracker/tests/conftest.py
from __future__ import annotations

"""
Fixtures compartidas: una API de passeios en memoria montada como adapter de
requests, de modo que transporte, servicio y store corren sin red real.
"""

import json
import math
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import parse_qs, unquote, urlsplit

import pytest
import requests
from requests.adapters import BaseAdapter

from dive_tracker.api.session import AuthSession
from dive_tracker.api.transport import ApiTransport
from dive_tracker.config import AppConfig
from dive_tracker.tours.service import TourService
from dive_tracker.tours.store import TourStore

BASE_URL = "http://api.test"


class FakeTourApi(BaseAdapter):
    """API remota mínima: CRUD, listados paginados, métricas y refresh de token."""

    def __init__(self) -> None:
        super().__init__()
        self.tours: Dict[str, Dict[str, Any]] = {}
        self.calls: List[Tuple[str, str, Optional[Dict[str, Any]], Dict[str, str]]] = []
        self.failures: List[Any] = []  # status int o "timeout" / "connection"
        self.require_auth = False
        self.valid_tokens = {"good-token"}
        self.valid_refresh_tokens = {"refresh-1"}
        self.rotated_refresh_token: Optional[str] = None  # si se define, /auth/refresh lo devuelve
        self.no_content_deletes = False
        self._next_id = 1

    # ------------------------------ helpers -----------------------------------

    def fail_next(self, *failures: Any) -> None:
        self.failures.extend(failures)

    def seed(self, **fields: Any) -> str:
        tour_id = f"t{self._next_id}"
        self._next_id += 1
        now = datetime.now(tz=timezone.utc).isoformat()
        self.tours[tour_id] = {"tour_id": tour_id, **fields, "created_at": now, "updated_at": now}
        return tour_id

    def calls_to(self, method: str, path: str) -> List[Tuple[str, str, Optional[Dict[str, Any]], Dict[str, str]]]:
        return [c for c in self.calls if c[0] == method and c[1] == path]

    @staticmethod
    def _response(request: requests.PreparedRequest, status: int, body: Any = None) -> requests.Response:
        resp = requests.Response()
        resp.status_code = status
        resp._content = json.dumps(body).encode("utf-8") if body is not None else b""
        resp.headers["Content-Type"] = "application/json"
        resp.encoding = "utf-8"
        resp.url = request.url
        resp.request = request
        resp.reason = "OK" if status < 400 else "Error"
        return resp

    def _page(self, request: requests.PreparedRequest, rows: List[Dict[str, Any]], query: Dict[str, str]) -> Dict[str, Any]:
        page = int(query.get("page", "1"))
        limit = int(query.get("limit", "10"))
        total = len(rows)
        total_pages = math.ceil(total / limit) if total else 0
        start = (page - 1) * limit
        return {
            "success": True,
            "data": rows[start:start + limit],
            "pagination": {
                "page": page,
                "limit": limit,
                "totalCount": total,
                "totalPages": total_pages,
                "hasNextPage": page < total_pages,
                "hasPrevPage": page > 1,
            },
        }

    def _metrics(self) -> Dict[str, Any]:
        rows = list(self.tours.values())

        def commission(t: Dict[str, Any]) -> float:
            if t["commission_type"] == "percentage":
                return t["total_value"] * t["guide_commission"] / 100
            return t["guide_commission"]

        return {
            "totalCount": len(rows),
            "totalValue": sum(t["total_value"] for t in rows),
            "totalCommission": sum(commission(t) for t in rows),
            "pendingClientPayments": sum(1 for t in rows if t["client_payment_status"] == "pending"),
            "paidTours": sum(1 for t in rows if t["client_payment_status"] == "paid"),
            "pendingGuidePayments": sum(1 for t in rows if t["guide_payment_status"] == "pending"),
        }

    # ------------------------------ adapter -----------------------------------

    def send(self, request: requests.PreparedRequest, **kwargs: Any) -> requests.Response:
        parts = urlsplit(request.url)
        path = unquote(parts.path)
        query = {k: v[0] for k, v in parse_qs(parts.query).items()}
        body = json.loads(request.body) if request.body else None
        self.calls.append((request.method, path, body, dict(request.headers)))

        if path == "/auth/refresh":
            if body and body.get("refreshToken") in self.valid_refresh_tokens:
                self.valid_tokens.add("new-token")
                payload = {"token": "new-token"}
                if self.rotated_refresh_token:
                    payload["refreshToken"] = self.rotated_refresh_token
                return self._response(request, 200, payload)
            return self._response(request, 401, {"message": "Invalid refresh token"})

        # Las fallas inyectadas aplican solo a /api/tour*
        if self.failures:
            failure = self.failures.pop(0)
            if failure == "timeout":
                raise requests.Timeout("timeout of 10000ms exceeded")
            if failure == "connection":
                raise requests.ConnectionError("Network Error")
            return self._response(request, failure, {"success": False, "message": f"Injected {failure}"})

        if self.require_auth:
            auth = request.headers.get("Authorization", "")
            if auth.removeprefix("Bearer ") not in self.valid_tokens:
                return self._response(request, 401, {"message": "Unauthorized"})

        return self._route(request, request.method, path, query, body)

    def _route(self, request, method, path, query, body) -> requests.Response:
        rows = list(self.tours.values())

        if path == "/api/tour" and method == "POST":
            tour_id = self.seed(**body)
            return self._response(request, 201, {"success": True, "message": "Tour created", "id": tour_id})

        if path == "/api/tour" and method == "GET":
            payload = self._page(request, rows, query)
            payload["metrics"] = self._metrics()
            return self._response(request, 200, payload)

        if path == "/api/tour/date-range" and method == "GET":
            start, end = query["startDate"], query["endDate"]
            matched = [t for t in rows if start <= t["tour_date"][:10] <= end]
            return self._response(request, 200, self._page(request, matched, query))

        if path.startswith("/api/tour/guide/") and method == "GET":
            name = path.rsplit("/", 1)[1].lower()
            matched = [t for t in rows if t["guide_name"].lower() == name]
            return self._response(request, 200, self._page(request, matched, query))

        if path.startswith("/api/tour/"):
            tour_id = path.rsplit("/", 1)[1]
            tour = self.tours.get(tour_id)
            if tour is None:
                return self._response(request, 404, {"success": False, "message": "Tour not found"})
            if method == "GET":
                return self._response(request, 200, {"success": True, "data": tour})
            if method == "PUT":
                tour.update(body)
                tour["updated_at"] = datetime.now(tz=timezone.utc).isoformat()
                return self._response(request, 200, {"success": True, "message": "Tour updated"})
            if method == "DELETE":
                del self.tours[tour_id]
                if self.no_content_deletes:
                    return self._response(request, 204)
                return self._response(request, 200, {"success": True, "message": "Tour deleted"})

        return self._response(request, 404, {"success": False, "message": f"No route {method} {path}"})

    def close(self) -> None:
        pass


# ------------------------------ Fixtures -------------------------------------


@pytest.fixture()
def fake_api() -> FakeTourApi:
    return FakeTourApi()


@pytest.fixture()
def cfg() -> AppConfig:
    return AppConfig(base_url=BASE_URL, timeout=5, retry_attempts=3, retry_base_delay=1.0, session_file=None, page_size=5)


@pytest.fixture()
def sleeps() -> List[float]:
    """Registra los delays de backoff en vez de dormir."""
    return []


@pytest.fixture()
def auth() -> AuthSession:
    return AuthSession()


@pytest.fixture()
def transport(cfg: AppConfig, fake_api: FakeTourApi, auth: AuthSession, sleeps: List[float]) -> ApiTransport:
    http = requests.Session()
    http.mount("http://", fake_api)
    return ApiTransport(cfg, session=auth, http=http, sleep=sleeps.append)


@pytest.fixture()
def service(transport: ApiTransport) -> TourService:
    return TourService(transport)


@pytest.fixture()
def store(service: TourService, cfg: AppConfig) -> TourStore:
    return TourStore(service, cfg)


@pytest.fixture()
def make_tour() -> Callable[..., Dict[str, Any]]:
    """Fábrica de payloads válidos de passeio (formato wire)."""
    def _make(**overrides: Any) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "client_name": "Ana Souza",
            "client_contact": "(81) 99999-0000",
            "contact_type": "whatsapp",
            "tour_date": "2025-05-10",
            "guide_name": "Carlos",
            "total_value": 180.0,
            "guide_commission": 50.0,
            "commission_type": "percentage",
            "client_payment_status": "pending",
            "guide_payment_status": "pending",
        }
        data.update(overrides)
        return data
    return _make
