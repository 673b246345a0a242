# dive_tracker/api/transport.py
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Mapping, Optional

import requests

from ..config import AppConfig
from ..exceptions import ApiError, AuthenticationExpired, NotFound
from .serialization import json_safe
from .session import AuthSession

logger = logging.getLogger(__name__)

REFRESH_PATH = "/auth/refresh"
DEFAULT_HEADERS: Dict[str, str] = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class ApiTransport:
    """Cliente HTTP de la API de passeios.

    - Base URL, timeout y negociación JSON fijos (desde AppConfig).
    - Adjunta ``Authorization: Bearer`` desde la AuthSession inyectada.
    - 401: un único refresh + reenvío; si el refresh falla limpia credenciales,
      avisa al límite de login (``on_auth_failure``) y lanza AuthenticationExpired.
    - Timeout o 5xx: reintento con backoff exponencial hasta ``retry_attempts``.
    - Toda falla sale normalizada como ApiError(message, status, code).
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        session: Optional[AuthSession] = None,
        http: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        on_auth_failure: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._cfg = config or AppConfig()
        self.session = session or AuthSession(self._cfg.session_file)
        self._http = http or requests.Session()
        self._http.headers.update(DEFAULT_HEADERS)
        self._sleep = sleep
        self._on_auth_failure = on_auth_failure

    # ------------------------------ API pública -------------------------------

    def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return self.request("GET", path, params=params)

    def post(self, path: str, body: Any = None) -> Dict[str, Any]:
        return self.request("POST", path, body=body)

    def put(self, path: str, body: Any = None) -> Dict[str, Any]:
        return self.request("PUT", path, body=body)

    def delete(self, path: str) -> Dict[str, Any]:
        return self.request("DELETE", path)

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        body: Any = None,
    ) -> Dict[str, Any]:
        url = self._url(path)
        payload = json_safe(body) if body is not None else None
        retries = 0
        auth_retried = False  # guardia _retry: un solo refresh por request

        while True:
            started = time.monotonic()
            logger.debug("API Request: %s %s", method.upper(), url)
            try:
                resp = self._http.request(
                    method,
                    url,
                    params=dict(params) if params else None,
                    json=payload,
                    headers=self._auth_headers(),
                    timeout=self._cfg.timeout,
                )
            except requests.Timeout as exc:
                if retries < self._cfg.retry_attempts:
                    retries += 1
                    self._backoff(retries, url)
                    continue
                raise ApiError(str(exc) or "Request timed out", status=0, code="timeout") from exc
            except requests.ConnectionError as exc:
                raise ApiError(str(exc) or "Network Error", status=0, code="connection_error") from exc
            except requests.RequestException as exc:
                raise ApiError(str(exc) or "An unexpected error occurred", status=0, code="request_error") from exc

            elapsed_ms = (time.monotonic() - started) * 1000
            logger.debug("API Response: %s %s (%.0fms)", resp.status_code, url, elapsed_ms)

            if resp.status_code == 401 and not auth_retried:
                auth_retried = True
                self._refresh_or_fail(resp)
                continue

            if 500 <= resp.status_code < 600 and retries < self._cfg.retry_attempts:
                retries += 1
                self._backoff(retries, url)
                continue

            if resp.status_code >= 400:
                raise self._normalize_error(resp)

            return self._decode(resp)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "ApiTransport":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------- Helpers ----------------------------------

    def _url(self, path: str) -> str:
        return f"{self._cfg.base_url.rstrip('/')}/{path.lstrip('/')}"

    def _auth_headers(self) -> Dict[str, str]:
        token = self.session.token
        return {"Authorization": f"Bearer {token}"} if token else {}

    def _backoff(self, attempt: int, url: str) -> None:
        delay = self._cfg.retry_base_delay * (2 ** attempt)
        logger.info("Reintentando request (%s/%s): %s en %.1fs", attempt, self._cfg.retry_attempts, url, delay)
        self._sleep(delay)

    def _refresh_or_fail(self, resp: requests.Response) -> None:
        refresh_token = self.session.refresh_token
        if not refresh_token:
            self._fail_auth(resp.status_code, "Sessão expirada. Faça login novamente.")
            return

        try:
            refresh = self._http.post(
                self._url(REFRESH_PATH),
                json={"refreshToken": refresh_token},
                timeout=self._cfg.timeout,
            )
            refresh.raise_for_status()
            body = refresh.json()
            new_token = body.get("token") if isinstance(body, dict) else None
            if not new_token:
                raise ValueError("Refresh response without token")
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Fallo el refresh del token: %s", exc)
            self._fail_auth(401, "Sessão expirada. Faça login novamente.", cause=exc)
            return

        logger.info("Token renovado; reenviando request original.")
        self.session.set_tokens(new_token, refresh_token=body.get("refreshToken"))

    def _fail_auth(self, status: int, message: str, cause: Optional[BaseException] = None) -> None:
        self.session.clear()
        if self._on_auth_failure is not None:
            self._on_auth_failure(self._cfg.login_url)
        raise AuthenticationExpired(message, status=status, code="auth_expired") from cause

    def _normalize_error(self, resp: requests.Response) -> ApiError:
        status = resp.status_code
        body: Any = None
        try:
            body = resp.json()
        except ValueError:
            body = None
        server_message = body.get("message") if isinstance(body, dict) else None
        server_code = body.get("code") if isinstance(body, dict) else None

        logger.error("API Error: %s %s %s", status, resp.request.method if resp.request else "", resp.url)
        if status == 403:
            logger.error("Access forbidden - insufficient permissions")
        if status == 404:
            logger.error("Resource not found")
        if status >= 500:
            logger.error("Server error - please try again later")

        message = server_message or f"Request failed with status code {status}"
        code = server_code or f"http_{status}"
        if status == 404:
            return NotFound(message, status=status, code=code)
        return ApiError(message, status=status, code=code)

    @staticmethod
    def _decode(resp: requests.Response) -> Dict[str, Any]:
        if resp.status_code == 204 or not resp.content:
            return {}
        try:
            body = resp.json()
        except ValueError as exc:
            raise ApiError("Invalid JSON response", status=resp.status_code, code="invalid_json") from exc
        if not isinstance(body, dict):
            return {"data": body}
        return body
