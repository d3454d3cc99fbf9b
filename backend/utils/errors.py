"""
Marketplace error taxonomy.

Services raise these; main.py renders them as JSON {"message", "error"}.
"""
from fastapi import status
from typing import Any, Optional


class MarketplaceError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, detail: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_dict(self) -> dict:
        body = {"message": self.message}
        if self.detail is not None:
            body["error"] = self.detail
        return body


class ValidationError(MarketplaceError):
    """Missing or malformed input"""
    status_code = status.HTTP_400_BAD_REQUEST


class RoleError(MarketplaceError):
    """Declared role may not perform the action"""
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(MarketplaceError):
    status_code = status.HTTP_404_NOT_FOUND


class BusinessRuleError(MarketplaceError):
    status_code = status.HTTP_400_BAD_REQUEST


class DuplicateRequest(BusinessRuleError):
    pass


class InvalidTransition(BusinessRuleError):
    pass


class CapacityExceeded(BusinessRuleError):
    pass


class SelfJoinError(BusinessRuleError):
    pass


class UpstreamError(MarketplaceError):
    """External price API failed"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class StoreError(MarketplaceError):
    """Persistence failure"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
