"""
Domain errors raised by services and repositories.

Handlers in app.main translate them to HTTP responses. Every error carries an
Arabic message (shown to users) and an English one (for API clients and logs).
"""
from typing import Any, Dict, Optional


class AroodError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(
        self,
        message_ar: str,
        message_en: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message_en or message_ar)
        self.message_ar = message_ar
        self.message_en = message_en or message_ar
        self.extra = extra or {}

    def to_dict(self) -> Dict[str, Any]:
        body = {
            "error": self.code,
            "detail": self.message_ar,
            "detail_en": self.message_en,
        }
        body.update(self.extra)
        return body


class ValidationFailed(AroodError):
    status_code = 400
    code = "validation_error"

    def __init__(self, message_ar: str, message_en: Optional[str] = None, field: Optional[str] = None):
        extra = {"errors": [{"field": field, "message": message_en or message_ar}]} if field else None
        super().__init__(message_ar, message_en, extra)
        self.field = field


class NotFound(AroodError):
    status_code = 404
    code = "not_found"


class Conflict(AroodError):
    status_code = 409
    code = "conflict"


class QuotaExceeded(AroodError):
    status_code = 429
    code = "quota_exceeded"


class UpstreamError(AroodError):
    """Payment gateway or other third party failed"""
    status_code = 502
    code = "upstream_error"
