# dive_tracker/tests/test_validators_formatters.py
from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from dive_tracker.exceptions import InvalidTourData
from dive_tracker.tours.dto import Tour, TourMetrics
from dive_tracker.tours.formatters import build_stat_cards, contact_link, tours_to_csv_bytes, tours_to_frame
from dive_tracker.tours.i18n import format_currency, format_date, format_percent, get_locale
from dive_tracker.tours.validators import build_create_request, parse_decimal, validate_tour_form


def _form(**overrides):
    form = {
        "client_name": "Ana",
        "client_contact": "(81) 99999-0000",
        "contact_type": "whatsapp",
        "tour_date": "2025-05-10",
        "guide_name": "Carlos",
        "total_value": "180,50",
        "guide_commission": "50",
        "commission_type": "percentage",
        "client_payment_status": "pending",
        "guide_payment_status": "pending",
    }
    form.update(overrides)
    return form


# ------------------------------ Validadores -----------------------------------


def test_valid_form_builds_request():
    req = build_create_request(_form())
    assert req.total_value == Decimal("180.50")
    assert req.tour_date == date(2025, 5, 10)


def test_form_collects_all_errors():
    errors = validate_tour_form(_form(client_name=" ", total_value="abc", tour_date="31/02/2025"))
    assert len(errors) == 3
    assert any("Nome do cliente" in e for e in errors)
    assert any("Valor total" in e for e in errors)
    assert any("Data do passeio" in e for e in errors)


def test_negative_commission_is_rejected():
    with pytest.raises(InvalidTourData) as exc_info:
        build_create_request(_form(guide_commission="-5"))
    assert "Comissão do guia não pode ser negativo." in exc_info.value.errors


def test_parse_decimal_handles_thousands():
    assert parse_decimal("1.234,56") == Decimal("1234.56")
    assert parse_decimal(12.5) == Decimal("12.5")


def test_parse_decimal_dot_groups_without_comma_are_thousands():
    assert parse_decimal("1.234") == Decimal("1234")
    assert parse_decimal("12.345.678") == Decimal("12345678")
    # otro largo tras el punto: decimal
    assert parse_decimal("180.5") == Decimal("180.5")
    assert parse_decimal("180.50") == Decimal("180.50")


def test_form_with_thousands_value_builds_full_amount():
    tour = build_create_request(_form(total_value="1.500"))
    assert tour.total_value == Decimal("1500")


# ------------------------------ Formato pt-BR ---------------------------------


def test_currency_pt_br():
    assert format_currency(Decimal("1234.5")) == "R$ 1.234,50"
    assert format_currency(0) == "R$ 0,00"
    assert format_currency(None) == "-"


def test_currency_other_locale():
    assert format_currency(1234.5, get_locale("en-US")) == "$ 1,234.50"


def test_percent_and_date():
    assert format_percent(Decimal("50")) == "50%"
    assert format_date(date(2025, 5, 10)) == "10/05/2025"


# ------------------------------ Presentación ----------------------------------


def test_stat_cards_use_server_metrics():
    stats = TourMetrics.model_validate({
        "totalCount": 12, "totalValue": 2500, "totalCommission": 640.5,
        "pendingClientPayments": 4, "paidTours": 8, "pendingGuidePayments": 3,
    })
    cards = build_stat_cards(stats)
    assert [c.title for c in cards] == ["Total de Passeios", "Receita Total", "Comissões Totais"]
    assert cards[0].value == "12"
    assert cards[0].description == "8 pagos, 4 pendentes"
    assert cards[1].value == "R$ 2.500,00"
    assert cards[2].value == "R$ 640,50"
    assert cards[2].description == "3 pendentes"


def test_contact_links(make_tour):
    wa = Tour.model_validate({"tour_id": "1", **make_tour(client_contact="(81) 99999-0000")})
    mail = Tour.model_validate({"tour_id": "2", **make_tour(contact_type="email", client_contact="a@b.com")})
    phone = Tour.model_validate({"tour_id": "3", **make_tour(contact_type="phone", client_contact="8133330000")})
    assert contact_link(wa) == "https://wa.me/5581999990000"
    assert contact_link(mail) == "mailto:a@b.com"
    assert contact_link(phone) == "tel:8133330000"


def test_frame_and_csv(make_tour):
    tours = [Tour.model_validate({"tour_id": "1", **make_tour()})]
    df = tours_to_frame(tours)
    assert df.loc[0, "Valor Comissão"] == "R$ 90,00"
    assert df.loc[0, "Pagamento Cliente"] == "Pendente"
    assert tours_to_frame([]).empty

    csv_text = tours_to_csv_bytes(tours).decode("utf-8")
    assert csv_text.splitlines()[0].startswith("tour_id,client_name")
    assert "commission_value" in csv_text.splitlines()[0]
