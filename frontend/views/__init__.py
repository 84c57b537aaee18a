from .auth import render_auth_page
from .catalog import render_fabrics_page, render_search_page, render_shops_page, render_tailors_page
from .cart import render_cart_page, render_checkout_page
from .orders import render_orders_page
from .dashboards import render_dashboard

__all__ = [
    'render_auth_page',
    'render_fabrics_page',
    'render_search_page',
    'render_shops_page',
    'render_tailors_page',
    'render_cart_page',
    'render_checkout_page',
    'render_orders_page',
    'render_dashboard',
]
