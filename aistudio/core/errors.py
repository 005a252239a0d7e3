"""
Error taxonomy for AI Studio.

Every user-visible failure is an AppError subclass. The exception handlers in
aistudio.main render them as JSON:

    {"error": "...", "message": "...", "hint": "...", ...}

`error` is always present. `hint` tells the operator how to fix
configuration and is part of the API contract, not incidental logging.

Propagation:
- ValidationError / AuthError / LicenseError abort the handler immediately
- ProviderError inside the chat pipeline advances the fallback chain;
  in single-provider endpoints (image, speech) it is surfaced directly
- ConfigurationError is raised when a required vendor credential is unset
"""

from typing import Any, Dict, Optional


class AppError(Exception):
    """Base exception for all AI Studio errors."""

    status_code: int = 500
    default_error: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        error: Optional[str] = None,
        hint: Optional[str] = None,
        details: Any = None,
        status_code: Optional[int] = None,
        extra: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message or error or self.default_error)
        self.error = error or self.default_error
        self.message = message
        self.hint = hint
        self.details = details
        self.extra = extra or {}
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        """Render as the JSON body returned to the caller."""
        body: Dict[str, Any] = {"error": self.error}
        if self.message:
            body["message"] = self.message
        if self.hint:
            body["hint"] = self.hint
        if self.details is not None:
            body["details"] = self.details
        body.update(self.extra)
        return body

    def __str__(self) -> str:
        if self.message:
            return f"{self.error}: {self.message}"
        return self.error


# =============================================================================
# Client errors
# =============================================================================


class ValidationError(AppError):
    """Malformed input, user-correctable."""

    status_code = 400
    default_error = "Validation error"


class AuthError(AppError):
    """Missing or invalid session."""

    status_code = 401
    default_error = "Unauthorized"


class LicenseError(AuthError):
    """The tenant is not licensed for the requested module."""

    status_code = 403
    default_error = "Module not licensed"

    def __init__(self, module_id: str, message: Optional[str] = None):
        super().__init__(
            message or f"Your plan does not include the '{module_id}' module.",
            hint="Upgrade your subscription or ask your administrator to enable this module.",
            extra={"moduleId": module_id},
        )
        self.module_id = module_id


class NotFoundError(AppError):
    """Referenced record is absent (or belongs to another tenant)."""

    status_code = 404
    default_error = "Not found"


# =============================================================================
# Vendor errors
# =============================================================================


class ProviderError(AppError):
    """
    A vendor call failed.

    Carries the vendor's HTTP status (None for network failures and
    timeouts) and the vendor-supplied message.
    """

    status_code = 502
    default_error = "AI provider error"

    def __init__(
        self,
        provider: str,
        message: str,
        *,
        vendor_status: Optional[int] = None,
        hint: Optional[str] = None,
        details: Any = None,
        status_code: Optional[int] = None,
        error: Optional[str] = None,
    ):
        super().__init__(
            message,
            error=error or f"{provider} error",
            hint=hint,
            details=details,
            status_code=status_code,
        )
        self.provider = provider
        self.vendor_status = vendor_status

    def __str__(self) -> str:
        status = f" ({self.vendor_status})" if self.vendor_status else ""
        return f"{self.provider}{status}: {self.message}"


class ConfigurationError(AppError):
    """A required vendor credential or setting is unset."""

    status_code = 503
    default_error = "Service not configured"

    def __init__(
        self,
        message: str,
        *,
        hint: str,
        error: Optional[str] = None,
        setup_instructions: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        extra = {"setupInstructions": setup_instructions} if setup_instructions else None
        super().__init__(
            message,
            error=error,
            hint=hint,
            status_code=status_code,
            extra=extra,
        )
