"""
app.py
Streamlit: controle de passeios de mergulho e comissões (uso interno da equipe).
Run: streamlit run dive_tracker/app.py
"""

from __future__ import annotations

import logging
from typing import Any, Dict

import streamlit as st

from dive_tracker.api.session import AuthSession
from dive_tracker.api.transport import ApiTransport
from dive_tracker.config import AppConfig
from dive_tracker.exceptions import AuthenticationExpired, InvalidTourData, TourError
from dive_tracker.tours import schema
from dive_tracker.tours.dto import Tour, TourFilters
from dive_tracker.tours.formatters import (
    STATUS_LABELS,
    build_stat_cards,
    contact_link,
    tours_to_csv_bytes,
    tours_to_frame,
)
from dive_tracker.tours.i18n import format_date, get_locale
from dive_tracker.tours.service import TourService
from dive_tracker.tours.store import TourStore
from dive_tracker.tours.validators import build_create_request

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

st.set_page_config(page_title="Controle de Mergulhos", layout="wide")

STATUS_FILTER_OPTIONS = [schema.STATUS_FILTER_ALL, *schema.PAYMENT_STATUSES]
STATUS_FILTER_LABELS = {schema.STATUS_FILTER_ALL: "Todos", **STATUS_LABELS}
CONTACT_OPTIONS = list(schema.CONTACT_TYPES)
CONTACT_OPTION_LABELS = {"whatsapp": "WhatsApp", "phone": "Telefone", "email": "E-mail"}
COMMISSION_OPTION_LABELS = {"percentage": "Porcentagem (%)", "fixed": "Valor fixo (R$)"}


def _on_auth_failure(login_url: str) -> None:
    st.session_state.login_redirect = login_url


def init_once() -> TourStore:
    # Uma store por sessão do navegador
    if "store" not in st.session_state:
        cfg = AppConfig()
        auth = AuthSession(cfg.session_file)
        transport = ApiTransport(cfg, session=auth, on_auth_failure=_on_auth_failure)
        store = TourStore(TourService(transport), cfg)
        st.session_state.cfg = cfg
        st.session_state.auth = auth
        st.session_state.store = store
        st.session_state.login_redirect = None
        store.refresh()
    return st.session_state.store


def header() -> None:
    col1, col2 = st.columns([5, 1])
    with col1:
        st.title("🤿 Controle de Mergulhos")
        st.caption("Passeios, pagamentos de clientes e comissões de guias")
    with col2:
        if st.button("Sair"):
            st.session_state.auth.clear()
            st.session_state.login_redirect = st.session_state.cfg.login_url
            st.rerun()

    if st.session_state.login_redirect:
        st.warning(f"Sessão encerrada. Faça login novamente em {st.session_state.login_redirect}.")


def dashboard(store: TourStore) -> None:
    locale = get_locale(st.session_state.cfg.locale, st.session_state.cfg.currency)
    cards = build_stat_cards(store.stats, locale)
    cols = st.columns(len(cards))
    for col, card in zip(cols, cards):
        col.metric(card.title, card.value)
        col.caption(card.description)


def tour_form(store: TourStore) -> None:
    defaults = st.session_state.cfg.form_defaults
    st.subheader("➕ Novo Passeio")

    with st.form("tour_form", clear_on_submit=True):
        col1, col2, col3 = st.columns(3)
        with col1:
            client_name = st.text_input("Nome do cliente", key="new_client_name")
            contact_type = st.selectbox(
                "Tipo de contato", CONTACT_OPTIONS, format_func=lambda v: CONTACT_OPTION_LABELS[v]
            )
            client_contact = st.text_input(
                "Contato", placeholder="(11) 99999-9999 ou email@exemplo.com", key="new_client_contact"
            )
        with col2:
            tour_date = st.date_input("Data do passeio", value=None, format="DD/MM/YYYY", key="new_tour_date")
            guide_name = st.text_input("Nome do guia", value=defaults.guide_name, key="new_guide_name")
            total_value = st.text_input(
                "Valor total (R$)", value=defaults.total_value, placeholder="1.234,56", help="Formato: 1.234,56",
                key="new_total_value",
            )
        with col3:
            guide_commission = st.text_input(
                "Comissão do guia", value=defaults.guide_commission, key="new_guide_commission"
            )
            commission_options = list(COMMISSION_OPTION_LABELS)
            commission_type = st.selectbox(
                "Tipo de comissão",
                commission_options,
                index=commission_options.index(defaults.commission_type)
                if defaults.commission_type in commission_options else 0,
                format_func=lambda v: COMMISSION_OPTION_LABELS[v],
            )
            client_payment_status = st.selectbox(
                "Pagamento do cliente", ["pending", "paid"], format_func=lambda v: STATUS_LABELS[v]
            )
            guide_payment_status = st.selectbox(
                "Pagamento do guia", ["pending", "paid"], format_func=lambda v: STATUS_LABELS[v]
            )

        submitted = st.form_submit_button("Cadastrar Mergulho", type="primary")

    if not submitted:
        return

    form: Dict[str, Any] = {
        schema.CLIENT_NAME: client_name,
        schema.CLIENT_CONTACT: client_contact,
        schema.CONTACT_TYPE: contact_type,
        schema.TOUR_DATE: tour_date,
        schema.GUIDE_NAME: guide_name,
        schema.TOTAL_VALUE: total_value,
        schema.GUIDE_COMMISSION: guide_commission,
        schema.COMMISSION_TYPE: commission_type,
        schema.CLIENT_PAYMENT_STATUS: client_payment_status,
        schema.GUIDE_PAYMENT_STATUS: guide_payment_status,
    }
    try:
        store.add_tour(build_create_request(form))
    except InvalidTourData as exc:
        for e in exc.errors:
            st.error(e)
        return
    except AuthenticationExpired:
        st.rerun()
    except TourError as exc:
        st.error(f"Erro ao cadastrar: {exc}. Verifique se todos os campos estão preenchidos corretamente.")
        return
    # cards do dashboard já desenhados nesta execução
    st.session_state.flash = ("success", "Passeio cadastrado! O passeio foi adicionado com sucesso.")
    st.rerun()


def filters_sidebar() -> TourFilters:
    with st.sidebar:
        st.subheader("Filtros")
        search = st.text_input("Buscar", placeholder="Nome ou contato do cliente...")
        date_from = st.date_input("Data inicial", value=None, format="DD/MM/YYYY")
        date_to = st.date_input("Data final", value=None, format="DD/MM/YYYY")
        guide_name = st.text_input("Guia", placeholder="Nome do guia...")
        client_status = st.selectbox(
            "Pagamento do cliente", STATUS_FILTER_OPTIONS, format_func=lambda v: STATUS_FILTER_LABELS[v]
        )
        guide_status = st.selectbox(
            "Pagamento do guia", STATUS_FILTER_OPTIONS, format_func=lambda v: STATUS_FILTER_LABELS[v]
        )

    if date_from and date_to and date_from > date_to:
        st.sidebar.error("A data inicial não pode ser maior que a final.")
        date_to = None
    return TourFilters(
        search=search,
        date_from=date_from,
        date_to=date_to,
        guide_name=guide_name,
        client_payment_status=client_status,
        guide_payment_status=guide_status,
    )


def _run_action(fn, success_message: str) -> None:
    try:
        fn()
    except AuthenticationExpired:
        pass
    except TourError as exc:
        st.session_state.flash = ("error", f"Falha na operação: {exc}")
    else:
        st.session_state.flash = ("success", success_message)
    st.rerun()


def tour_actions(store: TourStore, tour: Tour) -> None:
    locale = get_locale(st.session_state.cfg.locale, st.session_state.cfg.currency)
    st.markdown(f"**{tour.client_name}** · {format_date(tour.tour_date, locale)} · guia {tour.guide_name}")

    c1, c2, c3, c4 = st.columns(4)
    c1.link_button("Contatar cliente", contact_link(tour))

    next_client = "pending" if tour.client_payment_status == "paid" else "paid"
    if c2.button(f"Cliente: marcar {STATUS_LABELS[next_client].lower()}", key=f"cli-{tour.tour_id}"):
        _run_action(
            lambda: store.set_payment_status(tour.tour_id, "client", next_client),
            f"Pagamento do cliente marcado como {STATUS_LABELS[next_client].lower()}.",
        )

    next_guide = "pending" if tour.guide_payment_status == "paid" else "paid"
    if c3.button(f"Guia: marcar {STATUS_LABELS[next_guide].lower()}", key=f"gui-{tour.tour_id}"):
        _run_action(
            lambda: store.set_payment_status(tour.tour_id, "guide", next_guide),
            f"Pagamento do guia marcado como {STATUS_LABELS[next_guide].lower()}.",
        )

    if c4.button("🗑️ Excluir", key=f"del-{tour.tour_id}"):
        _run_action(lambda: store.delete_tour(tour.tour_id), "Passeio excluído.")


def pagination_controls(store: TourStore) -> None:
    cfg = st.session_state.cfg
    p = store.pagination
    c1, c2, c3, c4 = st.columns([1, 2, 1, 2])
    if c1.button("◀ Anterior", disabled=not p.has_prev_page):
        store.previous_page()
        st.rerun()
    c2.caption(f"Página {p.page} de {max(p.total_pages, 1)} · {p.total_count} passeios")
    if c3.button("Próxima ▶", disabled=not p.has_next_page):
        store.next_page()
        st.rerun()

    options = list(cfg.page_size_options)
    if store.limit not in options:
        options.append(store.limit)
    size = c4.selectbox("Itens por página", options, index=options.index(store.limit))
    if size != store.limit:
        store.change_page_size(size)
        st.rerun()


def tours_page(store: TourStore) -> None:
    filters = filters_sidebar()
    locale = get_locale(st.session_state.cfg.locale, st.session_state.cfg.currency)
    visible = store.filter_tours(filters)

    st.subheader("📋 Passeios")
    st.dataframe(tours_to_frame(visible, locale), use_container_width=True, hide_index=True)
    pagination_controls(store)

    st.download_button(
        "Exportar página (CSV)",
        data=tours_to_csv_bytes(visible),
        file_name=f"passeios_pagina_{store.page}.csv",
        mime="text/csv",
    )

    if not visible:
        st.caption("Nenhum passeio encontrado com os filtros atuais.")
        return

    st.divider()
    by_id = {t.tour_id: t for t in visible}
    selected = st.selectbox(
        "Ações do passeio",
        list(by_id),
        format_func=lambda tid: f"{by_id[tid].client_name} ({format_date(by_id[tid].tour_date, locale)})",
    )
    tour_actions(store, by_id[selected])


def main() -> None:
    store = init_once()
    header()

    flash = st.session_state.pop("flash", None)
    if flash:
        kind, message = flash
        (st.success if kind == "success" else st.error)(message)
    if store.error:
        st.error(store.error)

    dashboard(store)
    st.divider()

    tab_list, tab_new = st.tabs(["Passeios", "Novo passeio"])
    with tab_list:
        tours_page(store)
    with tab_new:
        tour_form(store)

    if st.sidebar.button("🔄 Atualizar"):
        store.refresh()
        st.rerun()


main()
