"""
Catalog Pages
Fabric, shop and tailor browsing, detail views, reviews, inquiries and search
"""

import logging
from typing import List, Optional

import streamlit as st

from components import CardBuilder, PanelBuilder
from models import Fabric, Role, Shop, Tailor
from state import AppState
from utils.errors import ApiError
from utils.formatters import format_price, format_rating

logger = logging.getLogger(__name__)

GRID_COLUMNS = 3
SEARCH_TYPES = {"All": "all", "Fabrics": "fabrics", "Shops": "shops", "Tailors": "tailors"}


def _grid(items: list, render, key: str, button_label: str = "View details"):
    """Lay cards out in rows; returns the item whose button was clicked"""
    clicked = None
    for start in range(0, len(items), GRID_COLUMNS):
        cols = st.columns(GRID_COLUMNS)
        for col, item in zip(cols, items[start:start + GRID_COLUMNS]):
            with col:
                render(item)
                if st.button(button_label, key=f"{key}_{item.id}", use_container_width=True):
                    clicked = item
    return clicked


def _render_reviews(reviews: List[dict]):
    if not reviews:
        st.caption("No reviews yet.")
        return
    for review in reviews[-10:]:
        rating = float(review.get("rating") or 0)
        name = review.get("name") or "Customer"
        st.markdown(f"**{name}** {format_rating(rating)}")
        if review.get("comment"):
            st.write(review["comment"])


def _review_form(key: str, submit) -> None:
    with st.form(key, clear_on_submit=True):
        rating = st.slider("Rating", 1, 5, 5)
        comment = st.text_area("Comment")
        if st.form_submit_button("Submit review"):
            try:
                submit(rating, comment.strip())
            except ApiError as e:
                st.error(str(e))
            else:
                st.success("Thanks for your review!")


def _require_customer(app: AppState, action: str) -> bool:
    if app.session.role is Role.CUSTOMER:
        return True
    if app.session.is_authenticated:
        st.caption(f"Only customers can {action}.")
    else:
        st.caption(f"Sign in as a customer to {action}.")
    return False


# =============================================================================
# Fabrics
# =============================================================================

def render_add_to_cart(app: AppState, fabric: Fabric, key: str):
    if not _require_customer(app, "add fabrics to the cart"):
        return
    if not fabric.in_stock:
        st.warning("Out of stock")
        return

    in_cart = app.cart.quantity_of(fabric.id)
    c1, c2 = st.columns([1, 2])
    with c1:
        quantity = st.number_input(
            "Meters", min_value=1, max_value=max(fabric.stock, 1), value=1, step=1, key=f"qty_{key}"
        )
    with c2:
        st.write("")
        if st.button("Add to cart", key=f"add_{key}", type="primary", use_container_width=True):
            if app.cart.add_item(fabric.id, int(quantity)):
                st.success(f"Added {int(quantity)} m of {fabric.name} to your cart")
            else:
                st.error(app.cart.error)
    if in_cart:
        st.caption(f"{in_cart} m already in your cart")


def render_fabric_detail(app: AppState, fabric_id: str):
    currency = app.settings.currency
    if st.button("← Back to fabrics"):
        st.session_state.pop("selected_fabric", None)
        st.rerun()

    try:
        fabric = Fabric.from_dict(app.client.get_fabric(fabric_id))
    except ApiError as e:
        st.error(str(e))
        return

    c1, c2 = st.columns([1, 1])
    with c1:
        st.image(fabric.image or "https://placehold.co/600x400?text=SuitCraft", use_container_width=True)
    with c2:
        st.markdown(f"## {fabric.name}")
        st.markdown(f"### {format_price(fabric.price, currency)} / m")
        st.write(fabric.description)
        details = {
            "Category": fabric.category,
            "Material": fabric.material,
            "Color": fabric.color,
            "Stock": f"{fabric.stock} m",
            "Shop": fabric.shop_name,
        }
        for label, value in details.items():
            if value:
                st.markdown(f"**{label}:** {value}")
        render_add_to_cart(app, fabric, f"detail_{fabric.id}")

    st.markdown("---")
    st.markdown(f"#### Reviews {format_rating(fabric.rating, len(fabric.reviews))}")
    _render_reviews(fabric.reviews)
    if _require_customer(app, "review fabrics"):
        _review_form(
            f"fabric_review_{fabric.id}",
            lambda rating, comment: app.client.add_fabric_review(fabric.id, rating, comment),
        )


def render_fabrics_page(app: AppState):
    selected = st.session_state.get("selected_fabric")
    if selected:
        render_fabric_detail(app, selected)
        return

    catalog = app.fabrics
    st.markdown("### Fabrics")

    if not catalog.all and not catalog.loading:
        with st.spinner("Loading fabrics..."):
            catalog.load()
    if catalog.error:
        st.error(catalog.error)

    PanelBuilder.render_fabric_filters(catalog)

    fabrics = catalog.filtered
    c1, c2 = st.columns([4, 1])
    c1.caption(f"Showing {len(fabrics)} of {len(catalog.all)} fabrics")
    if c2.button("↻ Refresh", key="fabrics_refresh", use_container_width=True):
        catalog.load()
        st.rerun()

    if not fabrics:
        st.info("No fabrics match these filters.")
        return

    clicked = _grid(
        fabrics,
        lambda f: CardBuilder.render_fabric_card(f, app.settings.currency),
        "fabric",
    )
    if clicked:
        st.session_state.selected_fabric = clicked.id
        st.rerun()


# =============================================================================
# Shops
# =============================================================================

def render_shop_detail(app: AppState, shop_id: str):
    if st.button("← Back to shops"):
        st.session_state.pop("selected_shop", None)
        st.rerun()

    try:
        shop = Shop.from_dict(app.client.get_shop(shop_id))
        fabrics = [Fabric.from_dict(f) for f in app.client.get_shop_fabrics(shop_id)]
    except ApiError as e:
        st.error(str(e))
        return

    c1, c2 = st.columns([1, 2])
    with c1:
        CardBuilder.render_shop_card(shop)
    with c2:
        st.markdown(f"## {shop.name}")
        st.write(shop.description)
        if shop.address:
            st.markdown(f"📍 {shop.address}")
        if shop.phone:
            st.markdown(f"📞 {shop.phone}")
        if app.session.role is Role.CUSTOMER and st.button("♥ Save to favourites", key="fav_shop"):
            try:
                app.client.add_favorite_shop(shop.id)
                st.success("Saved to your favourites")
            except ApiError as e:
                st.error(str(e))

    st.markdown("---")
    st.markdown(f"#### Fabrics from {shop.name}")
    if not fabrics:
        st.info("This shop has no fabrics listed yet.")
        return
    clicked = _grid(
        fabrics,
        lambda f: CardBuilder.render_fabric_card(f, app.settings.currency),
        "shop_fabric",
    )
    if clicked:
        st.session_state.current_page = "Fabrics"
        st.session_state.selected_fabric = clicked.id
        st.rerun()


def render_shops_page(app: AppState):
    selected = st.session_state.get("selected_shop")
    if selected:
        render_shop_detail(app, selected)
        return

    st.markdown("### Fabric Shops")
    city = st.text_input("City", key="shop_city", placeholder="Any city")
    try:
        shops = [Shop.from_dict(s) for s in app.client.get_shops({"city": city} if city.strip() else None)]
    except ApiError as e:
        st.error(str(e))
        return

    if not shops:
        st.info("No shops found.")
        return

    clicked = _grid(shops, CardBuilder.render_shop_card, "shop", "Visit shop")
    if clicked:
        st.session_state.selected_shop = clicked.id
        st.rerun()


# =============================================================================
# Tailors
# =============================================================================

def render_inquiry_form(app: AppState, tailor: Tailor):
    if not _require_customer(app, "contact tailors"):
        return
    with st.form(f"inquiry_{tailor.id}", clear_on_submit=True):
        subject = st.text_input("Subject")
        message = st.text_area("Message")
        if st.form_submit_button("Send inquiry", type="primary"):
            if not subject.strip() or not message.strip():
                st.error("Please enter a subject and a message")
                return
            try:
                app.client.send_inquiry(tailor.id, subject.strip(), message.strip())
            except ApiError as e:
                st.error(str(e))
            else:
                st.success(f"Inquiry sent to {tailor.name}")


def render_tailor_detail(app: AppState, tailor_id: str):
    if st.button("← Back to tailors"):
        st.session_state.pop("selected_tailor", None)
        st.rerun()

    try:
        tailor = Tailor.from_dict(app.client.get_tailor(tailor_id))
    except ApiError as e:
        st.error(str(e))
        return

    c1, c2 = st.columns([1, 2])
    with c1:
        CardBuilder.render_tailor_card(tailor)
    with c2:
        st.markdown(f"## {tailor.name}")
        st.write(tailor.bio)
        m1, m2, m3 = st.columns(3)
        m1.metric("Experience", f"{tailor.experience} yrs")
        m2.metric("Rating", f"{tailor.rating:.1f}")
        m3.metric("Projects", tailor.completed_projects)
        if app.session.role is Role.CUSTOMER and st.button("♥ Save to favourites", key="fav_tailor"):
            try:
                app.client.add_favorite_tailor(tailor.id)
                st.success("Saved to your favourites")
            except ApiError as e:
                st.error(str(e))

    tab_inquiry, tab_reviews = st.tabs(["Send an inquiry", "Reviews"])
    with tab_inquiry:
        render_inquiry_form(app, tailor)
    with tab_reviews:
        _render_reviews(tailor.reviews)
        if _require_customer(app, "review tailors"):
            _review_form(
                f"tailor_review_{tailor.id}",
                lambda rating, comment: app.client.add_tailor_review(tailor.id, rating, comment),
            )


def render_tailors_page(app: AppState):
    selected = st.session_state.get("selected_tailor")
    if selected:
        render_tailor_detail(app, selected)
        return

    catalog = app.tailors
    st.markdown("### Tailors")

    if not catalog.all and not catalog.loading:
        with st.spinner("Loading tailors..."):
            catalog.load()
    if catalog.error:
        st.error(catalog.error)

    PanelBuilder.render_tailor_filters(catalog)

    tailors = catalog.filtered
    st.caption(f"Showing {len(tailors)} of {len(catalog.all)} tailors")
    if not tailors:
        st.info("No tailors match these filters.")
        return

    clicked = _grid(tailors, CardBuilder.render_tailor_card, "tailor", "View profile")
    if clicked:
        st.session_state.selected_tailor = clicked.id
        st.rerun()


# =============================================================================
# Search
# =============================================================================

def _open(page: str, key: str, item_id: str):
    st.session_state.current_page = page
    st.session_state[key] = item_id
    st.rerun()


def _results(section: Optional[dict]) -> list:
    if not section:
        return []
    return section.get("data") or []


def suggestion_texts(suggestions: list, limit: int = 5) -> List[str]:
    """Distinct suggestion texts, first seen first"""
    texts = []
    for item in suggestions or []:
        text = item.get("text") if isinstance(item, dict) else item
        if text and text not in texts:
            texts.append(text)
    return texts[:limit]


def _use_suggestion(text: str):
    st.session_state.search_query = text


def _render_suggestions(app: AppState, query: str):
    try:
        texts = suggestion_texts(app.client.get_search_suggestions(query))
    except ApiError as e:
        logger.info("No suggestions for %r: %s", query, e)
        return
    if not texts:
        return
    st.caption("Did you mean:")
    for col, text in zip(st.columns(len(texts)), texts):
        col.button(text, key=f"suggest_{text}", on_click=_use_suggestion, args=(text,))


def render_search_page(app: AppState):
    st.markdown("### Search")
    c1, c2 = st.columns([3, 1])
    with c1:
        query = st.text_input("Search fabrics, shops and tailors", key="search_query")
    with c2:
        search_type = SEARCH_TYPES[st.selectbox("In", list(SEARCH_TYPES.keys()), key="search_type")]

    query = query.strip()
    if not query:
        st.caption("Try \"linen\", \"Mumbai\" or \"wedding suits\".")
        return

    try:
        payload = app.client.search(query, search_type)
    except ApiError as e:
        st.error(str(e))
        return

    results = payload.get("results", payload)
    fabrics = [Fabric.from_dict(f) for f in _results(results.get("fabrics"))]
    shops = [Shop.from_dict(s) for s in _results(results.get("shops"))]
    tailors = [Tailor.from_dict(t) for t in _results(results.get("tailors"))]
    logger.debug("Search %r: %d fabrics, %d shops, %d tailors", query, len(fabrics), len(shops), len(tailors))

    if not (fabrics or shops or tailors):
        st.info(f"No results for \"{query}\".")
        _render_suggestions(app, query)
        return

    if fabrics:
        st.markdown(f"#### Fabrics ({len(fabrics)})")
        clicked = _grid(fabrics, lambda f: CardBuilder.render_fabric_card(f, app.settings.currency), "search_fabric")
        if clicked:
            _open("Fabrics", "selected_fabric", clicked.id)
    if shops:
        st.markdown(f"#### Shops ({len(shops)})")
        clicked = _grid(shops, CardBuilder.render_shop_card, "search_shop", "Visit shop")
        if clicked:
            _open("Shops", "selected_shop", clicked.id)
    if tailors:
        st.markdown(f"#### Tailors ({len(tailors)})")
        clicked = _grid(tailors, CardBuilder.render_tailor_card, "search_tailor", "View profile")
        if clicked:
            _open("Tailors", "selected_tailor", clicked.id)
