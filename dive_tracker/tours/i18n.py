# dive_tracker/tours/i18n.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Optional, Union

Number = Union[int, float, Decimal]


@dataclass(frozen=True)
class LocaleConfig:
    """Configuración mínima de formato.
    No usamos Babel para evitar dependencia; ajusta aquí símbolos y separadores.
    """
    locale: str = "pt-BR"
    currency: str = "BRL"
    currency_symbol: str = "R$"
    decimal_sep: str = ","
    thousand_sep: str = "."
    date_format: str = "%d/%m/%Y"


DEFAULT_LOCALE = LocaleConfig()

_LOCALES: Dict[str, LocaleConfig] = {
    "pt-BR": DEFAULT_LOCALE,
    "en-US": LocaleConfig(locale="en-US", currency="USD", currency_symbol="$", decimal_sep=".", thousand_sep=",",
                          date_format="%m/%d/%Y"),
}


def get_locale(locale: str, currency: Optional[str] = None) -> LocaleConfig:
    """Resuelve un LocaleConfig conocido; locales desconocidos caen en pt-BR."""
    cfg = _LOCALES.get(locale, DEFAULT_LOCALE)
    if currency and currency != cfg.currency:
        symbol = {"BRL": "R$", "USD": "$", "EUR": "€"}.get(currency, currency)
        cfg = LocaleConfig(cfg.locale, currency, symbol, cfg.decimal_sep, cfg.thousand_sep, cfg.date_format)
    return cfg


def format_number(value: Number, cfg: LocaleConfig = DEFAULT_LOCALE, ndigits: int = 2) -> str:
    q = Decimal(str(value)).quantize(Decimal(1).scaleb(-ndigits), rounding=ROUND_HALF_UP)
    # "{:,.2f}" usa separador US, lo sustituimos por el deseado si difiere.
    s = f"{q:,.{ndigits}f}"
    if cfg.thousand_sep != "," or cfg.decimal_sep != ".":
        s = s.replace(",", "X").replace(".", cfg.decimal_sep).replace("X", cfg.thousand_sep)
    return s


def format_currency(value: Optional[Number], cfg: LocaleConfig = DEFAULT_LOCALE, ndigits: int = 2) -> str:
    """Formatea un monto como moneda ('R$ 1.234,50'). Si value es None, devuelve '-'."""
    if value is None:
        return "-"
    s = format_number(abs(Decimal(str(value))), cfg, ndigits)
    sign = "-" if Decimal(str(value)) < 0 else ""
    return f"{sign}{cfg.currency_symbol} {s}"


def format_percent(value: Optional[Number], cfg: LocaleConfig = DEFAULT_LOCALE, ndigits: int = 0) -> str:
    """Formatea un porcentaje ya expresado en 0..100 ('50%')."""
    if value is None:
        return "-"
    return f"{format_number(value, cfg, ndigits)}%"


def format_date(value: Optional[Union[date, datetime]], cfg: LocaleConfig = DEFAULT_LOCALE) -> str:
    if value is None:
        return "-"
    return value.strftime(cfg.date_format)
