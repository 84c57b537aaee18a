"""
Backend API Client
Connects the Streamlit frontend to the SuitCraft REST backend.

Every call goes through ``_request``, which attaches the bearer token,
unwraps the ``{success, message, data}`` envelope and turns any failure into
an ``ApiError`` carrying a single displayable message.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import requests

from utils.errors import ApiError

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "An error occurred"
DUPLICATE_REGISTRATION_MESSAGE = "User already exists with this email or Role"
INVALID_CREDENTIALS_MESSAGE = "Wrong password or email. Please try again."

PAGE_LIMIT = 50
MAX_PAGES = 50

UploadFile = Tuple[str, bytes, str]  # (filename, content, mime type)


def normalize_error_message(status_code: Optional[int], message: Optional[str]) -> str:
    """Rephrase the backend messages end users keep tripping over"""
    message = message or DEFAULT_ERROR_MESSAGE
    lowered = message.lower()

    # Duplicate email surfaces as a generic 500 from the register endpoint
    if status_code == 500 and "server error during registration" in lowered:
        return DUPLICATE_REGISTRATION_MESSAGE

    # Same message for unknown email and wrong password
    if status_code == 401 and "invalid credentials" in lowered:
        return INVALID_CREDENTIALS_MESSAGE

    return message


def fetch_all_pages(
    fetch: Callable[[dict], List[dict]],
    params: Optional[dict] = None,
    limit: int = PAGE_LIMIT,
    max_pages: int = MAX_PAGES,
) -> List[dict]:
    """
    Collect every page of a paginated list endpoint.

    The backend may cap ``limit`` below what was asked, so the first page's
    length is taken as the real page size; a shorter (or empty) page ends
    the walk. A page identical to the previous one also ends it, for
    servers that ignore ``page`` altogether.
    """
    records: List[dict] = []
    page_size = None
    previous = None
    for page in range(1, max_pages + 1):
        batch = fetch({**(params or {}), "page": page, "limit": limit}) or []
        if not batch or batch == previous:
            break
        records.extend(batch)
        if page_size is None:
            page_size = len(batch)
        if len(batch) < page_size:
            break
        previous = batch
    else:
        logger.warning("Stopped paging after %d pages", max_pages)
    return records


class APIClient:
    """Client for backend API communication"""

    def __init__(
        self,
        base_url: str = "http://localhost:5000/api/v1",
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        timeout: float = 10,
        upload_timeout: float = 30,
    ):
        self.base_url = base_url.rstrip('/')
        self.token_provider = token_provider
        self.timeout = timeout
        self.upload_timeout = upload_timeout
        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    # =========================================================================
    # Transport
    # =========================================================================

    def _headers(self) -> Dict[str, str]:
        token = self.token_provider() if self.token_provider else None
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    @staticmethod
    def _decode(resp: requests.Response) -> Any:
        try:
            return resp.json()
        except ValueError:
            return {}

    @staticmethod
    def _extract_message(payload: Any) -> Optional[str]:
        if not isinstance(payload, dict):
            return None
        message = payload.get("message")
        errors = payload.get("errors")
        # express-validator failures: "Validation failed" plus per-field details
        if errors and isinstance(errors, list) and isinstance(errors[0], dict):
            detail = errors[0].get("msg")
            if detail:
                return f"{message}: {detail}" if message else detail
        return message

    def _request(
        self,
        method: str,
        endpoint: str,
        params: dict = None,
        data: Any = None,
        files: Any = None,
        timeout: float = None,
    ) -> Any:
        """Make a request and return the unwrapped ``data`` payload"""
        url = f"{self.base_url}{endpoint}"
        logger.debug("%s %s", method, endpoint)
        try:
            resp = self.session.request(
                method,
                url,
                params=params,
                json=data if files is None else None,
                files=files,
                headers=self._headers(),
                timeout=timeout or self.timeout,
            )
        except requests.exceptions.Timeout:
            logger.warning("%s %s timed out", method, endpoint)
            raise ApiError("Request timed out") from None
        except requests.exceptions.ConnectionError:
            logger.warning("%s %s: backend unreachable", method, endpoint)
            raise ApiError("Backend not connected") from None
        except requests.exceptions.RequestException as e:
            raise ApiError(str(e) or DEFAULT_ERROR_MESSAGE) from e

        payload = self._decode(resp)
        if not resp.ok or (isinstance(payload, dict) and payload.get("success") is False):
            message = normalize_error_message(resp.status_code, self._extract_message(payload))
            logger.info("%s %s failed (%s): %s", method, endpoint, resp.status_code, message)
            raise ApiError(message, resp.status_code)

        if isinstance(payload, dict) and "data" in payload:
            return payload["data"]
        return payload

    def _get(self, endpoint: str, params: dict = None) -> Any:
        return self._request("GET", endpoint, params=params)

    def _post(self, endpoint: str, data: dict = None) -> Any:
        return self._request("POST", endpoint, data=data)

    def _put(self, endpoint: str, data: dict = None) -> Any:
        return self._request("PUT", endpoint, data=data)

    def _delete(self, endpoint: str) -> Any:
        return self._request("DELETE", endpoint)

    # =========================================================================
    # Health & Status
    # =========================================================================

    def health(self) -> dict:
        """Check backend health"""
        return self._get("/health")

    def is_connected(self) -> bool:
        """Check if backend is reachable"""
        try:
            self.health()
        except ApiError:
            return False
        return True

    # =========================================================================
    # Auth
    # =========================================================================

    def login(self, email: str, password: str, role: str) -> dict:
        """Returns ``{token, user}``"""
        return self._post("/auth/login", {"email": email, "password": password, "role": role})

    def register(self, user_data: dict) -> dict:
        """Returns ``{token, user}``"""
        return self._post("/auth/register", user_data)

    def get_current_user(self) -> dict:
        """Resolve the bearer token into a user payload"""
        result = self._get("/auth/me")
        if isinstance(result, dict) and "user" in result:
            return result["user"]
        return result

    def update_account(self, account_data: dict) -> dict:
        return self._put("/auth/profile", account_data)

    # =========================================================================
    # Cart (every call returns the full cart snapshot)
    # =========================================================================

    def get_cart(self) -> dict:
        return self._get("/cart")

    def add_to_cart(self, fabric_id: str, quantity: int) -> dict:
        return self._post("/cart/add", {"fabricId": fabric_id, "quantity": quantity})

    def update_cart_item(self, fabric_id: str, quantity: int) -> dict:
        return self._put(f"/cart/update/{fabric_id}", {"quantity": quantity})

    def remove_from_cart(self, fabric_id: str) -> dict:
        return self._delete(f"/cart/remove/{fabric_id}")

    def clear_cart(self) -> dict:
        return self._delete("/cart/clear")

    # =========================================================================
    # Fabrics
    # =========================================================================

    def get_fabrics(self, params: dict = None) -> List[dict]:
        return self._get("/fabrics", params) or []

    def get_fabric(self, fabric_id: str) -> dict:
        return self._get(f"/fabrics/{fabric_id}")

    def add_fabric_review(self, fabric_id: str, rating: int, comment: str) -> dict:
        return self._post(f"/fabrics/{fabric_id}/reviews", {"rating": rating, "comment": comment})

    def create_fabric(self, shop_id: str, fabric_data: dict) -> dict:
        return self._post(f"/shops/{shop_id}/fabrics", fabric_data)

    def update_fabric(self, fabric_id: str, fabric_data: dict) -> dict:
        return self._put(f"/fabrics/{fabric_id}", fabric_data)

    def delete_fabric(self, fabric_id: str) -> dict:
        return self._delete(f"/fabrics/{fabric_id}")

    # =========================================================================
    # Shops
    # =========================================================================

    def get_shops(self, params: dict = None) -> List[dict]:
        return self._get("/shops", params) or []

    def get_shop(self, shop_id: str) -> dict:
        return self._get(f"/shops/{shop_id}")

    def get_shop_fabrics(self, shop_id: str, params: dict = None) -> List[dict]:
        return self._get(f"/shops/{shop_id}/fabrics", params) or []

    def update_shop(self, shop_id: str, shop_data: dict) -> dict:
        return self._put(f"/shops/{shop_id}", shop_data)

    def get_shop_orders(self, shop_id: str, params: dict = None) -> List[dict]:
        return self._get(f"/shops/{shop_id}/orders", params) or []

    def get_shop_analytics(self, shop_id: str) -> dict:
        return self._get(f"/analytics/shop/{shop_id}") or {}

    # =========================================================================
    # Tailors & Inquiries
    # =========================================================================

    def get_tailors(self, params: dict = None) -> List[dict]:
        return self._get("/tailors", params) or []

    def get_tailor(self, tailor_id: str) -> dict:
        return self._get(f"/tailors/{tailor_id}")

    def update_tailor(self, tailor_id: str, tailor_data: dict) -> dict:
        return self._put(f"/tailors/{tailor_id}", tailor_data)

    def add_tailor_review(self, tailor_id: str, rating: int, comment: str) -> dict:
        return self._post(f"/tailors/{tailor_id}/reviews", {"rating": rating, "comment": comment})

    def send_inquiry(self, tailor_id: str, subject: str, message: str) -> dict:
        return self._post(f"/tailors/{tailor_id}/inquiries", {"subject": subject, "message": message})

    def get_tailor_inquiries(self, tailor_id: str) -> List[dict]:
        return self._get(f"/tailors/{tailor_id}/inquiries") or []

    def reply_to_inquiry(self, tailor_id: str, inquiry_id: str, message: str) -> dict:
        return self._post(f"/tailors/{tailor_id}/inquiries/{inquiry_id}/reply", {"message": message})

    def mark_inquiry_read(self, tailor_id: str, inquiry_id: str) -> dict:
        return self._put(f"/tailors/{tailor_id}/inquiries/{inquiry_id}/read")

    def close_inquiry(self, tailor_id: str, inquiry_id: str) -> dict:
        return self._put(f"/tailors/{tailor_id}/inquiries/{inquiry_id}/close")

    def get_my_inquiries(self) -> List[dict]:
        return self._get("/inquiries/my") or []

    # =========================================================================
    # Orders
    # =========================================================================

    def create_order(self, order_data: dict) -> dict:
        return self._post("/orders", order_data)

    def get_orders(self, params: dict = None) -> List[dict]:
        return self._get("/orders", params) or []

    def get_order(self, order_id: str) -> dict:
        return self._get(f"/orders/{order_id}")

    def cancel_order(self, order_id: str, reason: str = "") -> dict:
        return self._put(f"/orders/{order_id}/cancel", {"reason": reason})

    # =========================================================================
    # Customer Profile
    # =========================================================================

    def get_profile(self) -> dict:
        return self._get("/customers/profile") or {}

    def update_profile(self, profile_data: dict) -> dict:
        return self._put("/customers/profile", profile_data)

    def add_address(self, address_data: dict) -> dict:
        return self._post("/customers/addresses", address_data)

    def update_address(self, address_id: str, address_data: dict) -> dict:
        return self._put(f"/customers/addresses/{address_id}", address_data)

    def delete_address(self, address_id: str) -> dict:
        return self._delete(f"/customers/addresses/{address_id}")

    def add_favorite_shop(self, shop_id: str) -> dict:
        return self._post(f"/customers/favorites/shops/{shop_id}")

    def remove_favorite_shop(self, shop_id: str) -> dict:
        return self._delete(f"/customers/favorites/shops/{shop_id}")

    def add_favorite_tailor(self, tailor_id: str) -> dict:
        return self._post(f"/customers/favorites/tailors/{tailor_id}")

    def remove_favorite_tailor(self, tailor_id: str) -> dict:
        return self._delete(f"/customers/favorites/tailors/{tailor_id}")

    def get_dashboard_stats(self) -> dict:
        return self._get("/customers/dashboard") or {}

    # =========================================================================
    # Search
    # =========================================================================

    def search(self, query: str, search_type: str = "all", params: dict = None) -> dict:
        return self._get("/search", {"q": query, "type": search_type, **(params or {})}) or {}

    def get_search_suggestions(self, query: str) -> List[dict]:
        """``[{type, text}]``; this endpoint replies with ``suggestions``, not ``data``"""
        payload = self._get("/search/suggestions", {"q": query})
        if isinstance(payload, dict):
            return payload.get("suggestions") or []
        return payload or []

    # =========================================================================
    # Image Upload (bytes forwarded as-is)
    # =========================================================================

    def upload_image(self, file: UploadFile) -> dict:
        """Upload one image, returns the stored image descriptor"""
        return self._request(
            "POST", "/upload/single", files={"image": file}, timeout=self.upload_timeout
        )

    def upload_images(self, files: Sequence[UploadFile]) -> List[dict]:
        """Upload several images in one multipart request"""
        return self._request(
            "POST",
            "/upload/multiple",
            files=[("images", f) for f in files],
            timeout=self.upload_timeout,
        ) or []
