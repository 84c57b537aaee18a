"""
Composition root: builds the client and every state holder and wires them.

Nothing here is a module-level singleton; the Streamlit app keeps one
``AppState`` per browser session and passes it to each page.
"""

import logging
from dataclasses import dataclass

from config import Settings
from models import Role, SessionStatus
from state.cart import CartStore
from state.catalog import FabricCatalog, TailorCatalog
from state.session import SessionManager
from state.tokens import FileTokenStore, TokenStore
from utils.api_client import APIClient

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    settings: Settings
    client: APIClient
    session: SessionManager
    cart: CartStore
    fabrics: FabricCatalog
    tailors: TailorCatalog


def _sync_cart_with_session(cart: CartStore):
    """Customers get their server cart on sign-in; everyone loses it on sign-out"""
    def on_session_change(session: SessionManager) -> None:
        if session.loading:
            return
        if session.status is SessionStatus.LOGGED_IN and session.role is Role.CUSTOMER:
            if cart.last_synced is None and not cart.loading:
                cart.fetch()
        elif session.status is SessionStatus.LOGGED_OUT and (cart.last_synced or not cart.snapshot.is_empty):
            cart.reset()

    return on_session_change


def build_app_state(settings: Settings, tokens: TokenStore = None, client: APIClient = None) -> AppState:
    tokens = tokens or FileTokenStore(settings.token_path)
    client = client or APIClient(
        settings.api_url,
        token_provider=tokens.load,
        timeout=settings.request_timeout,
        upload_timeout=settings.upload_timeout,
    )
    session = SessionManager(client, tokens)
    cart = CartStore(client)
    session.subscribe(_sync_cart_with_session(cart))
    logger.debug("App state built against %s", settings.api_url)
    return AppState(
        settings=settings,
        client=client,
        session=session,
        cart=cart,
        fabrics=FabricCatalog(client),
        tailors=TailorCatalog(client),
    )
