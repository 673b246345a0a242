# dive_tracker/exceptions.py
from __future__ import annotations

from typing import Any, Dict, List, Optional


class TourError(Exception):
    """Base para errores del dominio de passeios."""


class ApiError(TourError):
    """Falla de transporte normalizada: mensaje, status (0 = sin respuesta) y código opcional."""

    def __init__(self, message: str, status: int = 0, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "status": self.status, "code": self.code}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, status={self.status}, code={self.code!r})"


class NotFound(ApiError):
    """El recurso no existe en el servidor (404)."""


class AuthenticationExpired(ApiError):
    """401 sin posibilidad de refresh; las credenciales ya fueron limpiadas."""


class OperationFailed(TourError):
    """El servidor respondió 2xx pero con success=false."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidTourData(TourError, ValueError):
    """Datos del passeio inválidos antes de enviarlos."""

    def __init__(self, errors: List[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Dados inválidos.")


class InvalidParam(TourError, ValueError):
    """Parámetro inválido o faltante (paginación, filtros, etc.)."""
