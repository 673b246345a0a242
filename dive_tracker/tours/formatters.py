# dive_tracker/tours/formatters.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Sequence

import pandas as pd

from .commission import calculate_commission_value
from .dto import Tour, TourMetrics
from .i18n import DEFAULT_LOCALE, LocaleConfig, format_currency, format_date, format_percent
from .schema import TOUR_ID

STATUS_LABELS: Dict[str, str] = {"paid": "Pago", "pending": "Pendente"}
CONTACT_LABELS: Dict[str, str] = {"whatsapp": "WhatsApp", "phone": "Telefone", "email": "E-mail"}

# Columnas de la tabla para UI / export
TABLE_COLUMNS: List[str] = [
    TOUR_ID,
    "Cliente",
    "Contato",
    "Data",
    "Guia",
    "Valor",
    "Comissão",
    "Valor Comissão",
    "Pagamento Cliente",
    "Pagamento Guia",
]


@dataclass(frozen=True)
class StatCard:
    title: str
    value: str
    description: str


def build_stat_cards(stats: TourMetrics, cfg: LocaleConfig = DEFAULT_LOCALE) -> List[StatCard]:
    """Tarjetas del dashboard, siempre desde las métricas del servidor (dataset completo)."""
    return [
        StatCard(
            title="Total de Passeios",
            value=str(stats.total_count),
            description=f"{stats.paid_tours} pagos, {stats.pending_client_payments} pendentes",
        ),
        StatCard(
            title="Receita Total",
            value=format_currency(stats.total_value, cfg),
            description="Valor total de todos os passeios",
        ),
        StatCard(
            title="Comissões Totais",
            value=format_currency(stats.total_commission, cfg),
            description=f"{stats.pending_guide_payments} pendentes",
        ),
    ]


def contact_link(tour: Tour) -> str:
    """Link de contacto según el tipo: wa.me (con DDI 55), mailto: o tel:."""
    if tour.contact_type == "whatsapp":
        digits = re.sub(r"\D", "", tour.client_contact)
        return f"https://wa.me/55{digits}"
    if tour.contact_type == "email":
        return f"mailto:{tour.client_contact}"
    return f"tel:{tour.client_contact}"


def commission_label(tour: Tour, cfg: LocaleConfig = DEFAULT_LOCALE) -> str:
    if tour.commission_type == "percentage":
        return format_percent(tour.guide_commission, cfg)
    return format_currency(tour.guide_commission, cfg)


def tour_row(tour: Tour, cfg: LocaleConfig = DEFAULT_LOCALE) -> Dict[str, str]:
    return {
        TOUR_ID: tour.tour_id,
        "Cliente": tour.client_name,
        "Contato": f"{CONTACT_LABELS[tour.contact_type]}: {tour.client_contact}",
        "Data": format_date(tour.tour_date, cfg),
        "Guia": tour.guide_name,
        "Valor": format_currency(tour.total_value, cfg),
        "Comissão": commission_label(tour, cfg),
        "Valor Comissão": format_currency(calculate_commission_value(tour), cfg),
        "Pagamento Cliente": STATUS_LABELS[tour.client_payment_status],
        "Pagamento Guia": STATUS_LABELS[tour.guide_payment_status],
    }


def tours_to_frame(tours: Sequence[Tour], cfg: LocaleConfig = DEFAULT_LOCALE) -> pd.DataFrame:
    if not tours:
        return pd.DataFrame(columns=TABLE_COLUMNS)
    return pd.DataFrame([tour_row(t, cfg) for t in tours], columns=TABLE_COLUMNS)


def tours_to_csv_bytes(tours: Sequence[Tour]) -> bytes:
    """Export de la página cargada con valores crudos (sin formato de moneda)."""
    rows = []
    for t in tours:
        row = t.model_dump(mode="json")
        row["commission_value"] = str(calculate_commission_value(t))
        rows.append(row)
    df = pd.DataFrame(rows)
    return df.to_csv(index=False).encode("utf-8")
