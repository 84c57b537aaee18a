"""
Cart and Checkout Pages
"""

import logging
from typing import List, Optional

import streamlit as st

from components import PanelBuilder
from models import Address, CartSnapshot, CheckoutSummary, Order, PaymentMethod, ShippingMethod
from state import AppState
from utils.errors import ApiError, ValidationError
from utils.formatters import format_price

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE = "https://placehold.co/120x90?text=Fabric"


def checkout_summary(app: AppState, snapshot: Optional[CartSnapshot] = None) -> CheckoutSummary:
    return CheckoutSummary.from_cart(
        snapshot or app.cart.snapshot,
        shipping_fee=app.settings.shipping_fee,
        tax_rate=app.settings.tax_rate,
    )


def build_order_payload(
    snapshot: CartSnapshot,
    address: Address,
    payment_method: PaymentMethod,
    shipping_method: ShippingMethod,
    notes: str = "",
) -> dict:
    """Validate the address and shape the ``POST /orders`` body"""
    if snapshot.is_empty:
        raise ValidationError("Your cart is empty")
    missing = address.missing_fields()
    if missing:
        labels = ", ".join(name.replace("_", " ") for name in missing)
        raise ValidationError(f"Please fill in the shipping address: {labels}")
    return {
        "items": [{"fabricId": item.fabric_id, "quantity": item.quantity} for item in snapshot.items],
        "shippingAddress": address.to_dict(),
        "paymentMethod": payment_method.value,
        "shippingMethod": shipping_method.value,
        "notes": notes.strip(),
    }


# =============================================================================
# Cart
# =============================================================================

def _render_cart_row(app: AppState, item, currency: str):
    c1, c2, c3, c4, c5 = st.columns([1, 3, 2, 2, 1])
    with c1:
        st.image(item.image or PLACEHOLDER_IMAGE, use_container_width=True)
    with c2:
        st.markdown(f"**{item.name or item.fabric_id}**")
        if item.shop_name:
            st.caption(item.shop_name)
        st.caption(f"{format_price(item.price, currency)} / m")
    with c3:
        max_value = max(item.stock, item.quantity) if item.stock else None
        quantity = st.number_input(
            "Meters", min_value=0, max_value=max_value, value=item.quantity, step=1,
            key=f"cart_qty_{item.fabric_id}", label_visibility="collapsed",
        )
        if int(quantity) != item.quantity:
            app.cart.set_quantity(item.fabric_id, int(quantity))
            st.rerun()
    with c4:
        st.markdown(f"**{format_price(item.subtotal, currency)}**")
    with c5:
        if st.button("🗑", key=f"cart_remove_{item.fabric_id}", help="Remove"):
            app.cart.remove_item(item.fabric_id)
            st.rerun()


def render_cart_page(app: AppState):
    cart = app.cart
    currency = app.settings.currency
    st.markdown("### Your Cart")

    if cart.last_synced is None and not cart.loading:
        with st.spinner("Loading your cart..."):
            cart.fetch()

    if cart.error:
        st.error(cart.error)
        if st.button("Dismiss", key="cart_dismiss"):
            cart.clear_error()
            st.rerun()

    if cart.snapshot.is_empty:
        st.info("Your cart is empty.")
        if st.button("Browse fabrics", type="primary"):
            st.session_state.current_page = "Fabrics"
            st.rerun()
        return

    left, right = st.columns([3, 1])
    with left:
        for item in cart.items:
            _render_cart_row(app, item, currency)
            st.markdown("---")
        if st.button("Clear cart", key="cart_clear"):
            cart.clear()
            st.rerun()
    with right:
        st.markdown("#### Summary")
        st.caption(f"{cart.total_items} item(s)")
        PanelBuilder.render_checkout_summary(checkout_summary(app), currency)
        if st.button("Proceed to checkout", type="primary", use_container_width=True):
            st.session_state.current_page = "Checkout"
            st.rerun()


# =============================================================================
# Checkout
# =============================================================================

def _saved_addresses(app: AppState) -> List[Address]:
    try:
        profile = app.client.get_profile()
    except ApiError as e:
        logger.info("Could not load saved addresses: %s", e)
        return []
    return [Address.from_dict(a) for a in profile.get("addresses") or []]


def _address_form(user, saved: List[Address]) -> Address:
    default = next((a for a in saved if a.is_default), saved[0] if saved else None)
    base = default or Address(name=user.name, city=user.city, phone=user.phone)
    if saved:
        options = ["New address"] + [a.one_line for a in saved]
        choice = st.selectbox("Saved addresses", options, index=options.index(base.one_line) if default else 0)
        if choice != "New address":
            base = saved[options.index(choice) - 1]

    c1, c2 = st.columns(2)
    with c1:
        name = st.text_input("Full name", value=base.name)
        city = st.text_input("City", value=base.city)
        zip_code = st.text_input("PIN code", value=base.zip_code)
    with c2:
        phone = st.text_input("Phone", value=base.phone)
        state = st.text_input("State", value=base.state)
    address = st.text_area("Address", value=base.address)
    return Address(
        name=name, address=address, city=city, state=state, zip_code=zip_code, phone=phone,
    )


def render_checkout_page(app: AppState):
    cart = app.cart
    currency = app.settings.currency
    st.markdown("### Checkout")

    if cart.snapshot.is_empty:
        st.info("Your cart is empty.")
        return

    left, right = st.columns([2, 1])
    with left:
        st.markdown("#### Shipping address")
        address = _address_form(app.session.user, _saved_addresses(app))

        st.markdown("#### Delivery and payment")
        shipping_method = st.radio(
            "Delivery", list(ShippingMethod), format_func=lambda m: m.value, horizontal=True
        )
        payment_method = st.selectbox(
            "Payment method", list(PaymentMethod), format_func=lambda m: m.value
        )
        notes = st.text_area("Order notes (optional)")

    with right:
        st.markdown("#### Order summary")
        for item in cart.items:
            st.caption(f"{item.name or item.fabric_id} × {item.quantity} = {format_price(item.subtotal, currency)}")
        summary = checkout_summary(app)
        PanelBuilder.render_checkout_summary(summary, currency)

        if st.button("Place order", type="primary", use_container_width=True):
            try:
                payload = build_order_payload(cart.snapshot, address, payment_method, shipping_method, notes)
                with st.spinner("Placing your order..."):
                    order = Order.from_dict(app.client.create_order(payload))
            except (ValidationError, ApiError) as e:
                st.error(str(e))
                return
            logger.info("Order %s placed", order.display_id)
            cart.clear()
            st.session_state.last_order = order.display_id
            st.session_state.current_page = "My Orders"
            st.rerun()
