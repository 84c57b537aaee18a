"""
Card Components
Listing cards for fabrics, shops, tailors and orders
"""

import html

import streamlit as st

from models import Fabric, Order, Shop, Tailor
from utils.formatters import format_date, format_distance, format_price, format_rating

PLACEHOLDER_IMAGE = "https://placehold.co/400x300?text=SuitCraft"


def _e(value) -> str:
    return html.escape(str(value or ""))


class CardBuilder:
    """Render catalog and order cards"""

    @staticmethod
    def render_fabric_card(fabric: Fabric, currency: str = "₹") -> None:
        stock_note = f"{fabric.stock} in stock" if fabric.in_stock else "Out of stock"
        stock_color = "#10b981" if fabric.in_stock else "#ef4444"
        st.image(fabric.image or PLACEHOLDER_IMAGE, use_container_width=True)
        st.markdown(f"""
        <div class="card">
            <div class="card-title">{_e(fabric.name)}</div>
            <div class="card-subtitle">{_e(fabric.material)} • {_e(fabric.color)} • {_e(fabric.category)}</div>
            <div class="card-row">
                <span class="card-price">{format_price(fabric.price, currency)}</span>
                <span style="color: {stock_color}; font-size: 12px;">{stock_note}</span>
            </div>
            <div class="card-meta">{_e(fabric.shop_name)} {('• ' + _e(fabric.shop_city)) if fabric.shop_city else ''}</div>
        </div>
        """, unsafe_allow_html=True)

    @staticmethod
    def render_shop_card(shop: Shop) -> None:
        st.image(shop.image or PLACEHOLDER_IMAGE, use_container_width=True)
        distance = format_distance(shop.distance) if shop.distance is not None else ""
        st.markdown(f"""
        <div class="card">
            <div class="card-title">{_e(shop.name)}</div>
            <div class="card-subtitle">{_e(shop.city)} {distance}</div>
            <div class="card-meta">{format_rating(shop.rating, shop.total_reviews)}</div>
            <div class="card-body">{_e(shop.description)[:140]}</div>
        </div>
        """, unsafe_allow_html=True)

    @staticmethod
    def render_tailor_card(tailor: Tailor) -> None:
        available = tailor.availability == "Available"
        badge_color = "#10b981" if available else "#f59e0b"
        st.image(tailor.image or PLACEHOLDER_IMAGE, use_container_width=True)
        st.markdown(f"""
        <div class="card">
            <div class="card-row">
                <span class="card-title">{_e(tailor.name)}</span>
                <span style="color: {badge_color}; font-size: 12px;">{_e(tailor.availability)}</span>
            </div>
            <div class="card-subtitle">{_e(tailor.city)} • {tailor.experience} yrs experience</div>
            <div class="card-meta">{format_rating(tailor.rating, tailor.total_reviews)}</div>
            <div class="card-body">{_e(', '.join(tailor.specialization))}</div>
            <div class="card-meta">{_e(tailor.price_range)}</div>
        </div>
        """, unsafe_allow_html=True)

    @staticmethod
    def render_order_card(order: Order, currency: str = "₹") -> None:
        color = order.status.color
        st.markdown(f"""
        <div class="card" style="border-left: 4px solid {color};">
            <div class="card-row">
                <span class="card-title">Order #{_e(order.display_id)}</span>
                <span style="background: {color}22; color: {color}; padding: 2px 10px; border-radius: 10px; font-size: 12px;">{order.status.value}</span>
            </div>
            <div class="card-subtitle">{format_date(order.created_at)} • {order.item_count} item(s) • {_e(order.payment_method)}</div>
            <div class="card-price">{format_price(order.total, currency)}</div>
        </div>
        """, unsafe_allow_html=True)
