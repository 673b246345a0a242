# dive_tracker/api/session.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)


class SessionCredentials(BaseModel):
    """Credenciales persistidas: bearer token, refresh token e identificador de cliente."""
    token: Optional[str] = None
    refresh_token: Optional[str] = None
    client_id: Optional[str] = None


class AuthSession:
    """Contexto explícito de credenciales que se inyecta al transporte.

    Si se pasa ``storage_path`` las credenciales se guardan en un JSON en cada
    cambio y se releen al construir, de modo que sobreviven a recargas.
    Sin ``storage_path`` viven solo en memoria.
    """

    def __init__(self, storage_path: Optional[Path] = None) -> None:
        self._path = Path(storage_path) if storage_path else None
        self._creds = self._load()

    # ------------------------------ Lectura -----------------------------------

    @property
    def token(self) -> Optional[str]:
        return self._creds.token

    @property
    def refresh_token(self) -> Optional[str]:
        return self._creds.refresh_token

    @property
    def client_id(self) -> Optional[str]:
        return self._creds.client_id

    @property
    def is_authenticated(self) -> bool:
        return bool(self._creds.token)

    # ------------------------------ Escritura ---------------------------------

    def set_tokens(
        self,
        token: str,
        refresh_token: Optional[str] = None,
        client_id: Optional[str] = None,
    ) -> None:
        update = {"token": token}
        if refresh_token is not None:
            update["refresh_token"] = refresh_token
        if client_id is not None:
            update["client_id"] = client_id
        self._creds = self._creds.model_copy(update=update)
        self._save()

    def set_auth_token(self, token: str) -> None:
        self.set_tokens(token)

    def clear(self) -> None:
        self._creds = SessionCredentials()
        if self._path is not None and self._path.exists():
            self._path.unlink()
            logger.info("Credenciales eliminadas de %s", self._path)

    # ------------------------------ Persistencia ------------------------------

    def _load(self) -> SessionCredentials:
        if self._path is None or not self._path.exists():
            return SessionCredentials()
        try:
            return SessionCredentials.model_validate_json(self._path.read_text(encoding="utf-8"))
        except ValidationError:
            logger.warning("Archivo de sesión corrupto en %s; se ignora.", self._path)
            return SessionCredentials()

    def _save(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(self._creds.model_dump_json(), encoding="utf-8")
