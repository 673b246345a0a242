# dive_tracker/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final, Optional, Tuple

from dotenv import load_dotenv

load_dotenv()

# —— API remota ——
API_BASE_URL: Final[str] = os.getenv("DIVE_API_BASE_URL", "http://localhost:3001")
API_TIMEOUT: Final[float] = float(os.getenv("DIVE_API_TIMEOUT", "10"))
API_RETRY_ATTEMPTS: Final[int] = int(os.getenv("DIVE_API_RETRY_ATTEMPTS", "3"))
API_RETRY_BASE_DELAY: Final[float] = float(os.getenv("DIVE_API_RETRY_BASE_DELAY", "1.0"))

# —— Sesión ——
_SESSION_FILE = os.getenv("DIVE_SESSION_FILE", "").strip()
SESSION_FILE: Final[Optional[Path]] = Path(_SESSION_FILE) if _SESSION_FILE else None
LOGIN_URL: Final[str] = os.getenv("DIVE_LOGIN_URL", "/login")

# —— Paginación ——
PAGE_SIZE: Final[int] = int(os.getenv("DIVE_PAGE_SIZE", "10"))
PAGE_SIZE_OPTIONS: Final[Tuple[int, ...]] = (5, 10, 20, 50)

# —— Localización ——
DEFAULT_LOCALE: Final[str] = os.getenv("DIVE_LOCALE", "pt-BR")
DEFAULT_CURRENCY: Final[str] = os.getenv("DIVE_CURRENCY", "BRL")

# —— Valores por defecto del formulario (carga repetida más rápida) ——
DEFAULT_GUIDE_NAME: Final[str] = os.getenv("DIVE_DEFAULT_GUIDE_NAME", "")
DEFAULT_TOTAL_VALUE: Final[str] = os.getenv("DIVE_DEFAULT_TOTAL_VALUE", "")
DEFAULT_GUIDE_COMMISSION: Final[str] = os.getenv("DIVE_DEFAULT_GUIDE_COMMISSION", "")
DEFAULT_COMMISSION_TYPE: Final[str] = os.getenv("DIVE_DEFAULT_COMMISSION_TYPE", "percentage")


@dataclass(frozen=True)
class FormDefaults:
    guide_name: str = DEFAULT_GUIDE_NAME
    total_value: str = DEFAULT_TOTAL_VALUE
    guide_commission: str = DEFAULT_GUIDE_COMMISSION
    commission_type: str = DEFAULT_COMMISSION_TYPE


@dataclass(frozen=True)
class AppConfig:
    """Snapshot inmutable de configuración consumida por transporte, servicio y store."""
    base_url: str = API_BASE_URL
    timeout: float = API_TIMEOUT
    retry_attempts: int = API_RETRY_ATTEMPTS
    retry_base_delay: float = API_RETRY_BASE_DELAY
    session_file: Optional[Path] = SESSION_FILE
    login_url: str = LOGIN_URL
    page_size: int = PAGE_SIZE
    page_size_options: Tuple[int, ...] = PAGE_SIZE_OPTIONS
    locale: str = DEFAULT_LOCALE
    currency: str = DEFAULT_CURRENCY
    form_defaults: FormDefaults = field(default_factory=FormDefaults)
