"""
Client Error Taxonomy
Every failure a page can see is one of these, carrying a displayable message.
"""

from typing import Optional


class MarketplaceError(Exception):
    """Base class for errors surfaced to the UI as a single string"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationError(MarketplaceError):
    """Rejected on the client before any request was sent"""


class ApiError(MarketplaceError):
    """Transport failure or backend-reported error, already normalized"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_transport_error(self) -> bool:
        return self.status_code is None


class SessionStateError(RuntimeError):
    """Illegal session state transition (programming error)"""
