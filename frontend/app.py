import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Tuple

import streamlit as st

from components.panels import PanelBuilder
from config import settings
from models import Role, SessionStatus
from state import AppState, build_app_state
from views import (
    render_auth_page,
    render_cart_page,
    render_checkout_page,
    render_dashboard,
    render_fabrics_page,
    render_orders_page,
    render_search_page,
    render_shops_page,
    render_tailors_page,
)

logger = logging.getLogger(__name__)

st.set_page_config(
    page_title="SuitCraft",
    page_icon="🧵",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Load CSS
try:
    with open(Path(__file__).parent / "assets" / "style.css", "r") as f:
        st.markdown(f"<style>{f.read()}</style>", unsafe_allow_html=True)
except FileNotFoundError:
    pass


@dataclass(frozen=True)
class Page:
    render: Callable[[AppState], None]
    roles: Optional[Tuple[Role, ...]] = None  # None: open to everyone
    anonymous_only: bool = False

    def visible_to(self, role: Optional[Role]) -> bool:
        if self.anonymous_only:
            return role is None
        return self.roles is None or role in self.roles


CUSTOMER_ONLY = (Role.CUSTOMER,)

PAGES = {
    "Fabrics": Page(render_fabrics_page),
    "Shops": Page(render_shops_page),
    "Tailors": Page(render_tailors_page),
    "Search": Page(render_search_page),
    "Cart": Page(render_cart_page, CUSTOMER_ONLY),
    "Checkout": Page(render_checkout_page, CUSTOMER_ONLY),
    "My Orders": Page(render_orders_page, CUSTOMER_ONLY),
    Role.CUSTOMER.dashboard: Page(render_dashboard, CUSTOMER_ONLY),
    Role.TAILOR.dashboard: Page(render_dashboard, (Role.TAILOR,)),
    Role.SHOP.dashboard: Page(render_dashboard, (Role.SHOP,)),
    "Sign in": Page(render_auth_page, anonymous_only=True),
}

DEFAULT_PAGE = "Fabrics"


def init_session_state():
    defaults = {
        'current_page': DEFAULT_PAGE,
        'connected': False,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def get_app_state() -> AppState:
    """One AppState per browser session, bootstrapped on first use"""
    if 'app' not in st.session_state:
        app = build_app_state(settings)
        st.session_state.connected = app.client.is_connected()
        with st.spinner("Restoring your session..."):
            app.session.bootstrap()
        logger.info("New browser session (%s, backend %s)", app.session.status.value,
                    "online" if st.session_state.connected else "offline")
        st.session_state.app = app
    return st.session_state.app


def render_sidebar(app: AppState) -> str:
    with st.sidebar:
        st.markdown("""
        <div style="text-align: center; padding: 24px 0; margin-bottom: 16px; background: linear-gradient(180deg, rgba(180, 83, 9, 0.08) 0%, transparent 100%); border-radius: 12px;">
            <div style="font-size: 36px; margin-bottom: 8px;">🧵</div>
            <div style="font-size: 18px; font-weight: 700; letter-spacing: -0.02em;">SUITCRAFT</div>
            <div style="font-size: 10px; color: #64748b; margin-top: 6px; letter-spacing: 0.05em;">FABRICS • SHOPS • TAILORS</div>
        </div>
        """, unsafe_allow_html=True)

        PanelBuilder.render_session_panel(app.session, st.session_state.connected)
        if app.session.role is Role.CUSTOMER:
            PanelBuilder.render_cart_badge(app.cart, app.settings.currency)

        if not st.session_state.connected and st.button("Reconnect", use_container_width=True):
            st.session_state.connected = app.client.is_connected()
            st.rerun()

        st.markdown("### PAGES")
        role = app.session.role
        pages = [name for name, page in PAGES.items() if page.visible_to(role)]
        if st.session_state.current_page not in pages:
            st.session_state.current_page = DEFAULT_PAGE

        page = st.radio(
            "Select Page",
            options=pages,
            index=pages.index(st.session_state.current_page),
            label_visibility="collapsed",
        )
        if page != st.session_state.current_page:
            st.session_state.current_page = page
            for key in ("selected_fabric", "selected_shop", "selected_tailor", "order_detail"):
                st.session_state.pop(key, None)

        if app.session.is_authenticated:
            st.markdown("---")
            if st.button("Sign out", use_container_width=True):
                app.session.logout()
                st.session_state.current_page = DEFAULT_PAGE
                st.rerun()

        return st.session_state.current_page


def render_page(app: AppState, name: str):
    page = PAGES[name]
    role = app.session.role
    if not page.visible_to(role):
        PanelBuilder.render_access_denied(page.roles or (), role)
        return
    page.render(app)


def main():
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    init_session_state()
    app = get_app_state()

    if app.session.status is SessionStatus.VERIFYING:
        st.info("Checking your saved session...")
        return

    name = render_sidebar(app)
    render_page(app, name)

    # Footer
    st.markdown("""
    <div style="text-align: center; padding: 32px 0; margin-top: 60px; border-top: 1px solid rgba(0,0,0,0.06);">
        <div style="font-size: 11px; color: #64748b; letter-spacing: 0.05em;">
            <span style="color: #b45309; font-weight: 600;">🧵 SUITCRAFT</span>
            <span style="margin: 0 12px; color: #cbd5e1;">|</span>
            Fabric shops and tailors near you
        </div>
    </div>
    """, unsafe_allow_html=True)


if __name__ == "__main__":
    main()
