"""
copilot-chat error types.

Every error carries a machine-readable ``code`` so callers can branch on why a
turn failed without parsing messages.
"""

from typing import Any, Optional


class CopilotChatError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details


class ConfigurationError(CopilotChatError):
    def __init__(self, message: str, errors: Optional[list[str]] = None):
        super().__init__("configuration_error", message, {"errors": errors} if errors else None)
        self.errors = errors or []


class NotInitializedError(CopilotChatError):
    def __init__(self, message: str = "Authenticator not initialized - call initialize() first"):
        super().__init__("not_initialized", message)


class AuthError(CopilotChatError):
    def __init__(self, message: str, code: str = "auth_error", details: Optional[dict[str, Any]] = None):
        super().__init__(code, message, details)


class SilentTokenError(AuthError):
    """Silent acquisition failed; ``reason`` says why user interaction is needed."""

    NO_ACCOUNT = "no_account"
    INTERACTION_REQUIRED = "interaction_required"
    CONSENT_REQUIRED = "consent_required"
    LOGIN_REQUIRED = "login_required"
    NETWORK = "network"
    UNKNOWN = "unknown"

    def __init__(self, message: str, reason: str = UNKNOWN):
        super().__init__(message, code="silent_token_error", details={"reason": reason})
        self.reason = reason


class InteractiveLoginError(AuthError):
    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message, code="interactive_login_error")
        self.cause = cause


class InteractiveTokenError(AuthError):
    def __init__(self, message: str, cause: Optional[BaseException] = None, silent_reason: Optional[str] = None):
        details = {"silent_reason": silent_reason} if silent_reason else None
        super().__init__(message, code="interactive_token_error", details=details)
        self.cause = cause
        self.silent_reason = silent_reason


class IdentityProviderError(CopilotChatError):
    """Raised by identity provider adapters. ``code`` is the provider's error code."""

    def __init__(self, code: str, message: str):
        super().__init__(code, message)


class ConversationStartError(CopilotChatError):
    def __init__(self, message: str = "Failed to get conversation ID from agent"):
        super().__init__("conversation_start_error", message)


NoConversationIdError = ConversationStartError


class TransportError(CopilotChatError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__("transport_error", message, {"status_code": status_code} if status_code else None)
        self.status_code = status_code
