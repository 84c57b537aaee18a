import streamlit as st

from components import CardBuilder, ChartBuilder
from models import Order
from state import AppState
from utils.api_client import fetch_all_pages
from utils.errors import ApiError
from utils.formatters import format_price


def _render_order_items(order: Order, currency: str):
    for item in order.items:
        fabric = item.get("fabric")
        name = fabric.get("name") if isinstance(fabric, dict) else item.get("name", "Fabric")
        quantity = item.get("quantity", 0)
        st.caption(f"{name} × {quantity} m = {format_price(item.get('subtotal'), currency)}")
    if order.shipping_address:
        st.caption(f"Ship to: {order.shipping_address.one_line}")


def _render_order_detail(app: AppState, order_id: str):
    """Full order fetched fresh, so status and tracking are current"""
    currency = app.settings.currency
    if st.button("← Back to orders", key="order_detail_back"):
        st.session_state.pop("order_detail", None)
        st.rerun()
    try:
        order = Order.from_dict(app.client.get_order(order_id))
    except ApiError as e:
        st.error(str(e))
        return
    CardBuilder.render_order_card(order, currency)
    _render_order_items(order, currency)
    if order.tracking_number:
        st.caption(f"Tracking number: {order.tracking_number}")


def render_orders_page(app: AppState):
    currency = app.settings.currency
    st.markdown("### My Orders")

    detail = st.session_state.get("order_detail")
    if detail:
        _render_order_detail(app, detail)
        return

    placed = st.session_state.pop("last_order", None)
    if placed:
        st.success(f"Order #{placed} placed. Thank you for shopping with SuitCraft!")

    try:
        orders = [Order.from_dict(o) for o in fetch_all_pages(app.client.get_orders)]
    except ApiError as e:
        st.error(str(e))
        return

    if not orders:
        st.info("You have not placed any orders yet.")
        return

    view = st.radio("View", ["Cards", "Table"], horizontal=True, label_visibility="collapsed")
    if view == "Table":
        df = ChartBuilder.orders_to_frame(orders)
        st.dataframe(df, use_container_width=True, hide_index=True)
        return

    for order in orders:
        CardBuilder.render_order_card(order, currency)
        with st.expander("Details"):
            _render_order_items(order, currency)
            if st.button("Open order", key=f"open_{order.id}"):
                st.session_state.order_detail = order.id
                st.rerun()
            if order.status.is_cancellable:
                reason = st.text_input("Reason for cancelling", key=f"cancel_reason_{order.id}")
                if st.button("Cancel order", key=f"cancel_{order.id}"):
                    try:
                        app.client.cancel_order(order.id, reason.strip())
                    except ApiError as e:
                        st.error(str(e))
                    else:
                        st.rerun()
