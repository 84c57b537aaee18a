"""
Panel Components
Sidebar panels, filter bars and summary blocks
"""

import streamlit as st
from typing import Iterable, Optional

from models import CheckoutSummary, Role
from state.cart import CartStore
from state.catalog import FabricCatalog, FabricSort, TailorCatalog, TailorSort
from state.session import SessionManager
from utils.formatters import format_price

FABRIC_PRICE_RANGES = {
    "Any price": "",
    "Under ₹500": "0-500",
    "₹500 - ₹1,000": "500-1000",
    "₹1,000 - ₹2,500": "1000-2500",
    "₹2,500 - ₹5,000": "2500-5000",
    "Above ₹5,000": "5000",
}

TAILOR_EXPERIENCE = {"Any": "", "2+ years": "2", "5+ years": "5", "10+ years": "10"}
TAILOR_RATING = {"Any": "", "3+ stars": "3", "4+ stars": "4", "4.5+ stars": "4.5"}


def _select(label: str, options: list, current: str, key: str) -> str:
    choices = [""] + [o for o in options if o]
    index = choices.index(current) if current in choices else 0
    return st.selectbox(label, choices, index=index, key=key, format_func=lambda v: v or "All")


def _select_mapped(label: str, mapping: dict, current: str, key: str) -> str:
    labels = list(mapping.keys())
    values = list(mapping.values())
    index = values.index(current) if current in values else 0
    return mapping[st.selectbox(label, labels, index=index, key=key)]


class PanelBuilder:
    """Build sidebar panels and filter bars"""

    @staticmethod
    def render_session_panel(session: SessionManager, connected: bool) -> None:
        """Signed-in user badge plus backend status"""
        dot = "#10b981" if connected else "#ef4444"
        status = "ONLINE" if connected else "OFFLINE"

        if session.is_authenticated:
            user = session.user
            who = f"{user.name}<br><span style='font-size: 11px; color: #64748b;'>{user.role.label}</span>"
        else:
            who = "Guest"

        st.markdown(f"""
        <div style="padding: 14px 16px; border-radius: 10px; border: 1px solid {dot}40; background: {dot}10; margin-bottom: 12px;">
            <div style="display: flex; align-items: center; gap: 8px;">
                <div style="width: 8px; height: 8px; background: {dot}; border-radius: 50%;"></div>
                <span style="font-size: 11px; font-weight: 600; color: {dot};">{status}</span>
            </div>
            <div style="margin-top: 8px; font-weight: 600;">{who}</div>
        </div>
        """, unsafe_allow_html=True)

    @staticmethod
    def render_cart_badge(cart: CartStore, currency: str = "₹") -> None:
        st.markdown(f"""
        <div style="display: flex; justify-content: space-between; padding: 10px 14px; border-radius: 10px; background: rgba(180, 83, 9, 0.08);">
            <span>🛒 {cart.total_items} item(s)</span>
            <span style="font-weight: 600;">{format_price(cart.total_amount, currency)}</span>
        </div>
        """, unsafe_allow_html=True)

    @staticmethod
    def render_checkout_summary(summary: CheckoutSummary, currency: str = "₹") -> None:
        rows = [
            ("Subtotal", summary.subtotal),
            ("Shipping", summary.shipping),
            ("Tax (GST)", summary.tax),
        ]
        for label, value in rows:
            c1, c2 = st.columns([2, 1])
            c1.write(label)
            c2.write(format_price(value, currency))
        st.markdown("---")
        c1, c2 = st.columns([2, 1])
        c1.markdown("**Total**")
        c2.markdown(f"**{format_price(summary.total, currency)}**")

    @staticmethod
    def render_fabric_filters(catalog: FabricCatalog) -> None:
        """Filter bar bound to the fabric catalog"""
        f = catalog.filters
        c1, c2, c3, c4, c5 = st.columns(5)
        with c1:
            category = _select("Category", catalog.options("category"), f.category, "fabric_category")
        with c2:
            price_range = _select_mapped("Price", FABRIC_PRICE_RANGES, f.price_range, "fabric_price")
        with c3:
            color = st.text_input("Color", value=f.color, key="fabric_color")
        with c4:
            material = _select("Material", catalog.options("material"), f.material, "fabric_material")
        with c5:
            sorts = list(FabricSort)
            sort_by = st.selectbox(
                "Sort by", sorts, index=sorts.index(f.sort_by),
                format_func=lambda s: s.label, key="fabric_sort",
            )

        changes = dict(category=category, price_range=price_range, color=color,
                       material=material, sort_by=sort_by)
        if any(getattr(f, k) != v for k, v in changes.items()):
            catalog.set_filters(**changes)

        if catalog.active_filters and st.button("Clear filters", key="fabric_clear"):
            catalog.clear_filters()
            for key in ("fabric_category", "fabric_price", "fabric_color", "fabric_material", "fabric_sort"):
                st.session_state.pop(key, None)
            st.rerun()

    @staticmethod
    def render_tailor_filters(catalog: TailorCatalog) -> None:
        """Filter bar bound to the tailor catalog"""
        f = catalog.filters
        c1, c2, c3, c4, c5 = st.columns(5)
        with c1:
            city = _select("City", catalog.options("city"), f.city, "tailor_city")
        with c2:
            specialization = _select("Specialization", catalog.options("specialization"),
                                     f.specialization, "tailor_spec")
        with c3:
            experience = _select_mapped("Experience", TAILOR_EXPERIENCE, f.experience, "tailor_exp")
        with c4:
            rating = _select_mapped("Rating", TAILOR_RATING, f.rating, "tailor_rating")
        with c5:
            sorts = list(TailorSort)
            sort_by = st.selectbox(
                "Sort by", sorts, index=sorts.index(f.sort_by),
                format_func=lambda s: s.label, key="tailor_sort",
            )

        changes = dict(city=city, specialization=specialization, experience=experience,
                       rating=rating, sort_by=sort_by)
        if any(getattr(f, k) != v for k, v in changes.items()):
            catalog.set_filters(**changes)

        if catalog.active_filters and st.button("Clear filters", key="tailor_clear"):
            catalog.clear_filters()
            for key in ("tailor_city", "tailor_spec", "tailor_exp", "tailor_rating", "tailor_sort"):
                st.session_state.pop(key, None)
            st.rerun()

    @staticmethod
    def render_access_denied(allowed: Iterable[Role], role: Optional[Role]) -> None:
        """Shown when a page is opened by the wrong role (or anonymously)"""
        names = ", ".join(r.label for r in allowed)
        if role is None:
            st.warning(f"Please sign in as {names} to view this page.")
        else:
            st.error(f"This page is only available to: {names}. You are signed in as {role.label}.")
