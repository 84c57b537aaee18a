"""
Role Dashboards
One dashboard per account role, dispatched through ``DASHBOARDS``.
"""

import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Callable, Dict, List, Optional

import streamlit as st

from components import CardBuilder, ChartBuilder
from models import Address, Fabric, Inquiry, InquiryStatus, Order, Role, Shop, Tailor, ref_id, to_decimal
from state import AppState
from utils.api_client import fetch_all_pages
from utils.errors import ApiError, ValidationError
from utils.formatters import format_date, format_price

logger = logging.getLogger(__name__)

FABRIC_CATEGORIES = ["Cotton", "Silk", "Wool", "Linen", "Synthetic", "Blended", "Other"]


def find_owned(fetch: Callable[[dict], List[dict]], user_id: str) -> Optional[dict]:
    """First record, across every page of ``fetch``, whose ``owner`` is ``user_id``"""
    for record in fetch_all_pages(fetch):
        if ref_id(record.get("owner")) == user_id:
            return record
    return None


def _metric_row(metrics: List[tuple]):
    for col, (label, value) in zip(st.columns(len(metrics)), metrics):
        col.metric(label, value)


# =============================================================================
# Customer
# =============================================================================

def _render_address_editor(app: AppState, addresses: List[Address]):
    for address in addresses:
        with st.expander(f"{'⭐ ' if address.is_default else ''}{address.name}: {address.one_line}"):
            edited = _address_fields(address, key=address.id)
            c1, c2 = st.columns(2)
            if c1.button("Save", key=f"addr_save_{address.id}"):
                missing = edited.missing_fields()
                if missing:
                    st.error(f"Please fill in: {', '.join(missing)}")
                else:
                    _call(lambda: app.client.update_address(address.id, edited.to_dict()), "Address updated")
            if c2.button("Delete", key=f"addr_del_{address.id}"):
                _call(lambda: app.client.delete_address(address.id), "Address deleted")

    with st.expander("➕ Add a new address"):
        new = _address_fields(Address(), key="new")
        if st.button("Add address", key="addr_add"):
            missing = new.missing_fields()
            if missing:
                st.error(f"Please fill in: {', '.join(missing)}")
            else:
                _call(lambda: app.client.add_address(new.to_dict()), "Address added")


def _address_fields(address: Address, key: str) -> Address:
    c1, c2 = st.columns(2)
    with c1:
        name = st.text_input("Name", value=address.name, key=f"addr_name_{key}")
        city = st.text_input("City", value=address.city, key=f"addr_city_{key}")
        zip_code = st.text_input("PIN code", value=address.zip_code, key=f"addr_zip_{key}")
    with c2:
        phone = st.text_input("Phone", value=address.phone, key=f"addr_phone_{key}")
        state = st.text_input("State", value=address.state, key=f"addr_state_{key}")
        is_default = st.checkbox("Default address", value=address.is_default, key=f"addr_default_{key}")
    line = st.text_input("Address", value=address.address, key=f"addr_line_{key}")
    return Address(
        id=address.id, name=name, address=line, city=city, state=state,
        zip_code=zip_code, phone=phone, is_default=is_default,
    )


def _call(action: Callable[[], object], success: str) -> None:
    """Run a one-off mutation; rerun on success so the page refetches"""
    try:
        action()
    except ApiError as e:
        st.error(str(e))
        return
    st.toast(success)
    st.rerun()


def _render_favorites(app: AppState, customer: dict):
    shops = [Shop.from_dict(s) for s in customer.get("favoriteShops") or [] if isinstance(s, dict)]
    tailors = [Tailor.from_dict(t) for t in customer.get("favoriteTailors") or [] if isinstance(t, dict)]

    st.markdown("#### Favourite shops")
    if not shops:
        st.caption("No favourite shops yet.")
    for shop in shops:
        c1, c2 = st.columns([4, 1])
        c1.write(f"**{shop.name}** · {shop.city}")
        if c2.button("Remove", key=f"unfav_shop_{shop.id}"):
            _call(lambda: app.client.remove_favorite_shop(shop.id), "Removed from favourites")

    st.markdown("#### Favourite tailors")
    if not tailors:
        st.caption("No favourite tailors yet.")
    for tailor in tailors:
        c1, c2 = st.columns([4, 1])
        c1.write(f"**{tailor.name}** · {tailor.city}")
        if c2.button("Remove", key=f"unfav_tailor_{tailor.id}"):
            _call(lambda: app.client.remove_favorite_tailor(tailor.id), "Removed from favourites")


def _render_account_form(app: AppState):
    user = app.session.user
    with st.form("account_form"):
        name = st.text_input("Name", value=user.name)
        phone = st.text_input("Phone", value=user.phone)
        city = st.text_input("City", value=user.city)
        if st.form_submit_button("Save changes"):
            if app.session.update_account({"name": name.strip(), "phone": phone.strip(), "city": city.strip()}):
                st.success("Account updated")
            else:
                st.error(app.session.error)


def build_preferences(fabric_types: List[str], min_price: float, max_price: float, colors: str) -> dict:
    """Body for ``PUT /customers/profile``; a zero maximum leaves the range open"""
    if max_price and max_price < min_price:
        raise ValidationError("Maximum price must be at least the minimum")
    price_range = {"min": min_price}
    if max_price:
        price_range["max"] = max_price
    return {
        "preferences": {
            "fabricTypes": list(fabric_types),
            "priceRange": price_range,
            "favoriteColors": [c.strip() for c in colors.split(",") if c.strip()],
        }
    }


def _render_preferences_form(app: AppState, customer: dict):
    prefs = customer.get("preferences") or {}
    price_range = prefs.get("priceRange") or {}
    with st.form("preferences_form"):
        fabric_types = st.multiselect(
            "Fabric types", FABRIC_CATEGORIES,
            default=[t for t in prefs.get("fabricTypes") or [] if t in FABRIC_CATEGORIES],
        )
        c1, c2 = st.columns(2)
        min_price = c1.number_input("Min price", min_value=0.0, value=float(price_range.get("min") or 0), step=100.0)
        max_price = c2.number_input(
            "Max price (0 for no limit)", min_value=0.0, value=float(price_range.get("max") or 0), step=100.0
        )
        colors = st.text_input("Favourite colours (comma separated)", value=", ".join(prefs.get("favoriteColors") or []))
        if st.form_submit_button("Save preferences"):
            try:
                data = build_preferences(fabric_types, min_price, max_price, colors)
            except ValidationError as e:
                st.error(str(e))
                return
            _call(lambda: app.client.update_profile(data), "Preferences saved")


def render_customer_dashboard(app: AppState):
    currency = app.settings.currency
    st.markdown(f"### Welcome, {app.session.user.name}")

    try:
        dashboard = app.client.get_dashboard_stats()
    except ApiError as e:
        st.error(str(e))
        return

    stats = dashboard.get("stats") or {}
    customer = dashboard.get("customer") or {}
    _metric_row([
        ("Orders", stats.get("totalOrders", 0)),
        ("Total spent", format_price(to_decimal(stats.get("totalSpent")), currency)),
        ("Favourite shops", stats.get("favoriteShops", 0)),
        ("Favourite tailors", stats.get("favoriteTailors", 0)),
        ("Loyalty points", stats.get("loyaltyPoints", 0)),
    ])

    tab_orders, tab_inquiries, tab_addresses, tab_favorites, tab_prefs, tab_account = st.tabs(
        ["Recent orders", "My inquiries", "Addresses", "Favourites", "Preferences", "Account"]
    )
    with tab_orders:
        recent = [Order.from_dict(o) for o in dashboard.get("recentOrders") or []]
        if not recent:
            st.info("No orders yet.")
        for order in recent:
            CardBuilder.render_order_card(order, currency)
    with tab_inquiries:
        _render_my_inquiries(app)
    with tab_addresses:
        _render_address_editor(app, [Address.from_dict(a) for a in customer.get("addresses") or []])
    with tab_favorites:
        _render_favorites(app, customer)
    with tab_prefs:
        _render_preferences_form(app, customer)
    with tab_account:
        _render_account_form(app)


def _render_my_inquiries(app: AppState):
    try:
        inquiries = [Inquiry.from_dict(i) for i in app.client.get_my_inquiries()]
    except ApiError as e:
        st.error(str(e))
        return
    if not inquiries:
        st.caption("You have not contacted any tailors yet.")
    for inquiry in inquiries:
        with st.expander(f"{inquiry.subject} ({inquiry.status.value})"):
            _render_thread(inquiry)


# =============================================================================
# Tailor
# =============================================================================

def _render_thread(inquiry: Inquiry):
    for message in inquiry.messages:
        sender = message.get("sender") or "customer"
        st.markdown(f"**{sender.title()}**: {message.get('message', '')}")


def _render_inquiry(app: AppState, tailor_id: str, inquiry: Inquiry):
    unread = "" if inquiry.is_read else "🔵 "
    title = f"{unread}{inquiry.subject} · {inquiry.customer_name} · {format_date(inquiry.created_at)}"
    with st.expander(title):
        st.markdown(
            f"<span style='color: {inquiry.status.color}; font-weight: 600;'>{inquiry.status.value.upper()}</span>"
            f" · {inquiry.customer_email}",
            unsafe_allow_html=True,
        )
        _render_thread(inquiry)

        if inquiry.status is InquiryStatus.CLOSED:
            return

        reply = st.text_area("Reply", key=f"reply_{inquiry.id}")
        c1, c2, c3 = st.columns(3)
        if c1.button("Send reply", key=f"send_{inquiry.id}", type="primary"):
            if not reply.strip():
                st.error("Please write a reply first")
            else:
                _call(lambda: app.client.reply_to_inquiry(tailor_id, inquiry.id, reply.strip()), "Reply sent")
        if not inquiry.is_read and c2.button("Mark as read", key=f"read_{inquiry.id}"):
            _call(lambda: app.client.mark_inquiry_read(tailor_id, inquiry.id), "Marked as read")
        if c3.button("Close inquiry", key=f"close_{inquiry.id}"):
            _call(lambda: app.client.close_inquiry(tailor_id, inquiry.id), "Inquiry closed")


def _render_tailor_profile_form(app: AppState, tailor: Tailor):
    with st.form("tailor_profile"):
        bio = st.text_area("Bio", value=tailor.bio)
        specialization = st.text_input("Specializations (comma separated)", value=", ".join(tailor.specialization))
        c1, c2, c3 = st.columns(3)
        experience = c1.number_input("Experience (years)", min_value=0, value=tailor.experience)
        price_range = c2.text_input("Price range", value=tailor.price_range)
        availability = c3.selectbox(
            "Availability", ["Available", "Busy", "Unavailable"],
            index=["Available", "Busy", "Unavailable"].index(tailor.availability)
            if tailor.availability in ("Available", "Busy", "Unavailable") else 0,
        )
        if st.form_submit_button("Save profile"):
            data = {
                "bio": bio.strip(),
                "specialization": [s.strip() for s in specialization.split(",") if s.strip()],
                "experience": int(experience),
                "priceRange": price_range.strip(),
                "availability": availability,
            }
            _call(lambda: app.client.update_tailor(tailor.id, data), "Profile updated")


def render_tailor_dashboard(app: AppState):
    st.markdown("### Tailor Dashboard")

    try:
        raw = find_owned(app.client.get_tailors, app.session.user.id)
    except ApiError as e:
        st.error(str(e))
        return
    if raw is None:
        st.info("No tailor profile is linked to this account yet.")
        return
    tailor = Tailor.from_dict(raw)

    try:
        inquiries = [Inquiry.from_dict(i) for i in app.client.get_tailor_inquiries(tailor.id)]
    except ApiError as e:
        st.error(str(e))
        inquiries = []

    _metric_row([
        ("Rating", f"{tailor.rating:.1f}"),
        ("Reviews", tailor.total_reviews),
        ("Completed projects", tailor.completed_projects),
        ("Open inquiries", sum(1 for i in inquiries if i.status is not InquiryStatus.CLOSED)),
        ("Unread", sum(1 for i in inquiries if not i.is_read)),
    ])

    tab_inquiries, tab_profile = st.tabs(["Inquiries", "Profile"])
    with tab_inquiries:
        show = st.radio("Show", ["Open", "All"], horizontal=True, key="inquiry_filter")
        visible = [i for i in inquiries if show == "All" or i.status is not InquiryStatus.CLOSED]
        if not visible:
            st.info("No inquiries.")
        for inquiry in visible:
            _render_inquiry(app, tailor.id, inquiry)
    with tab_profile:
        _render_tailor_profile_form(app, tailor)


# =============================================================================
# Shop
# =============================================================================

IMAGE_TYPES = ["png", "jpg", "jpeg", "webp"]
SHOP_DESCRIPTION_LIMIT = 500


@dataclass
class ShopData:
    """What the shop dashboard shows; ``errors`` maps a section to its failure"""
    analytics: dict = field(default_factory=dict)
    fabrics: List[Fabric] = field(default_factory=list)
    orders: List[Order] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)


def load_shop_data(client, shop_id: str) -> ShopData:
    """Load analytics, inventory and orders independently of one another"""
    loaders = {
        "analytics": lambda: client.get_shop_analytics(shop_id) or {},
        "fabrics": lambda: [
            Fabric.from_dict(f) for f in fetch_all_pages(partial(client.get_shop_fabrics, shop_id))
        ],
        "orders": lambda: [
            Order.from_dict(o) for o in fetch_all_pages(partial(client.get_shop_orders, shop_id))
        ],
    }
    data = ShopData()
    for section, load in loaders.items():
        try:
            setattr(data, section, load())
        except ApiError as e:
            logger.info("Could not load %s of shop %s: %s", section, shop_id, e)
            data.errors[section] = str(e)
        except (ValueError, TypeError) as e:
            logger.warning("Malformed %s payload for shop %s: %s", section, shop_id, e)
            data.errors[section] = f"Unexpected {section} data from server"
    return data


def build_shop_update(name: str, description: str, phone: str, address: str, city: str) -> dict:
    """Body for ``PUT /shops/:id``; the backend requires name, description and phone"""
    data = {
        "name": name.strip(),
        "description": description.strip(),
        "phone": phone.strip(),
        "address": address.strip(),
        "city": city.strip(),
    }
    missing = [label for label in ("name", "description", "phone") if not data[label]]
    if missing:
        raise ValidationError(f"Please fill in: {', '.join(missing)}")
    if len(data["description"]) > SHOP_DESCRIPTION_LIMIT:
        raise ValidationError(f"Description cannot exceed {SHOP_DESCRIPTION_LIMIT} characters")
    return data


def image_urls(uploaded: List[dict]) -> List[str]:
    """URLs out of the upload endpoint's ``[{url, publicId}]`` reply"""
    return [item["url"] for item in uploaded or [] if isinstance(item, dict) and item.get("url")]


def _upload_image(app: AppState, uploaded) -> Optional[str]:
    if uploaded is None:
        return None
    try:
        result = app.client.upload_image((uploaded.name, uploaded.getvalue(), uploaded.type))
    except ApiError as e:
        st.error(f"Image upload failed: {e}")
        return None
    return (result or {}).get("url")


def _upload_gallery(app: AppState, uploaded: list) -> List[str]:
    if not uploaded:
        return []
    try:
        result = app.client.upload_images([(f.name, f.getvalue(), f.type) for f in uploaded])
    except ApiError as e:
        st.error(f"Gallery upload failed: {e}")
        return []
    return image_urls(result)


def _fabric_form(app: AppState, key: str, fabric: Optional[Fabric] = None) -> Optional[dict]:
    """Fabric fields; returns the request body when submitted and valid"""
    fabric = fabric or Fabric(id="", name="", price=to_decimal(0))
    with st.form(f"fabric_form_{key}", clear_on_submit=not fabric.id):
        c1, c2 = st.columns(2)
        with c1:
            name = st.text_input("Name", value=fabric.name)
            price = st.number_input("Price per meter", min_value=0.0, value=float(fabric.price), step=10.0)
            stock = st.number_input("Stock (m)", min_value=0, value=fabric.stock, step=1)
            category = st.selectbox(
                "Category", FABRIC_CATEGORIES,
                index=FABRIC_CATEGORIES.index(fabric.category) if fabric.category in FABRIC_CATEGORIES else 0,
            )
        with c2:
            color = st.text_input("Color", value=fabric.color)
            material = st.text_input("Material", value=fabric.material)
            width = st.text_input("Width", value="58 inches")
            image = st.file_uploader("Image", type=IMAGE_TYPES, key=f"fabric_image_{key}")
            gallery = st.file_uploader(
                "More images", type=IMAGE_TYPES, accept_multiple_files=True, key=f"fabric_gallery_{key}"
            )
        description = st.text_area("Description", value=fabric.description)
        submitted = st.form_submit_button("Save fabric" if fabric.id else "Add fabric", type="primary")

    if not submitted:
        return None
    if not name.strip() or not description.strip():
        st.error("Name and description are required")
        return None

    data = {
        "name": name.strip(),
        "price": price,
        "stock": int(stock),
        "category": category,
        "color": color.strip(),
        "material": material.strip(),
        "width": width.strip(),
        "description": description.strip(),
    }
    url = _upload_image(app, image)
    if url:
        data["image"] = url
    elif not fabric.id:
        st.error("Please add an image")
        return None
    urls = _upload_gallery(app, gallery)
    if urls:
        data["images"] = urls
    return data


def _render_inventory(app: AppState, shop: Shop, fabrics: List[Fabric]):
    currency = app.settings.currency
    with st.expander("➕ Add a fabric"):
        data = _fabric_form(app, "new")
        if data:
            _call(lambda: app.client.create_fabric(shop.id, data), "Fabric added")

    for fabric in fabrics:
        low = " ⚠️" if fabric.stock < 10 else ""
        with st.expander(f"{fabric.name} · {format_price(fabric.price, currency)} · {fabric.stock} m{low}"):
            data = _fabric_form(app, fabric.id, fabric)
            if data:
                _call(lambda: app.client.update_fabric(fabric.id, data), "Fabric updated")
            if st.button("Delete fabric", key=f"fabric_del_{fabric.id}"):
                _call(lambda: app.client.delete_fabric(fabric.id), "Fabric deleted")


def _render_shop_profile_form(app: AppState, shop: Shop):
    with st.form("shop_profile"):
        name = st.text_input("Shop name", value=shop.name)
        description = st.text_area("Description", value=shop.description, max_chars=SHOP_DESCRIPTION_LIMIT)
        c1, c2 = st.columns(2)
        phone = c1.text_input("Phone", value=shop.phone)
        city = c2.text_input("City", value=shop.city)
        address = st.text_input("Address", value=shop.address)
        if st.form_submit_button("Save shop"):
            try:
                data = build_shop_update(name, description, phone, address, city)
            except ValidationError as e:
                st.error(str(e))
                return
            _call(lambda: app.client.update_shop(shop.id, data), "Shop updated")


def render_shop_dashboard(app: AppState):
    currency = app.settings.currency
    st.markdown("### Shop Dashboard")

    try:
        raw = find_owned(app.client.get_shops, app.session.user.id)
    except ApiError as e:
        st.error(str(e))
        return
    if raw is None:
        st.info("No shop is linked to this account yet.")
        return
    shop = Shop.from_dict(raw)

    data = load_shop_data(app.client, shop.id)
    analytics, fabrics, orders = data.analytics, data.fabrics, data.orders

    _metric_row([
        ("Fabrics", analytics.get("totalFabrics", len(fabrics))),
        ("Orders", analytics.get("totalOrders", len(orders))),
        ("Revenue", format_price(to_decimal(analytics.get("totalRevenue")), currency)),
        ("Rating", f"{float(analytics.get('avgRating') or shop.rating):.1f}"),
    ])

    tab_overview, tab_inventory, tab_orders, tab_profile = st.tabs(["Overview", "Inventory", "Orders", "Shop profile"])
    with tab_overview:
        if "analytics" in data.errors:
            st.error(f"Analytics unavailable: {data.errors['analytics']}")
        c1, c2 = st.columns(2)
        with c1:
            st.plotly_chart(ChartBuilder.create_orders_by_status_chart(orders), use_container_width=True)
        with c2:
            st.plotly_chart(ChartBuilder.create_revenue_chart(orders), use_container_width=True)
        top = [Fabric.from_dict(f) for f in analytics.get("topFabrics") or []]
        if top:
            st.markdown("#### Top fabrics")
            for fabric in top:
                st.write(f"**{fabric.name}** · {format_price(fabric.price, currency)} · {fabric.stock} m left")
        if fabrics:
            st.plotly_chart(ChartBuilder.create_stock_chart(fabrics), use_container_width=True)
    with tab_inventory:
        if "fabrics" in data.errors:
            st.error(f"Inventory unavailable: {data.errors['fabrics']}")
        _render_inventory(app, shop, fabrics)
    with tab_orders:
        if "orders" in data.errors:
            st.error(f"Orders unavailable: {data.errors['orders']}")
        elif not orders:
            st.info("No orders yet.")
        else:
            st.dataframe(ChartBuilder.orders_to_frame(orders), use_container_width=True, hide_index=True)
    with tab_profile:
        _render_shop_profile_form(app, shop)


DASHBOARDS: Dict[Role, Callable[[AppState], None]] = {
    Role.CUSTOMER: render_customer_dashboard,
    Role.TAILOR: render_tailor_dashboard,
    Role.SHOP: render_shop_dashboard,
}


def render_dashboard(app: AppState):
    """Dashboard of the signed-in role"""
    DASHBOARDS[app.session.role](app)
