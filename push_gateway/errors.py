from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .notifications.schemas import DispatchOutcome


class PushGatewayError(Exception):
    """Base class for errors converted to JSON at the request boundary."""


class ConfigError(PushGatewayError):
    """The Firebase service-account credential is missing or malformed."""


class ValidationError(PushGatewayError):
    """The inbound notification request is missing a required field."""

    def __init__(self, code: str, message: Optional[str] = None):
        super().__init__(message or code)
        self.code = code
        self.message = message or code


class DispatchError(PushGatewayError):
    """Every message tier was attempted and none was accepted by FCM."""

    def __init__(self, outcome: "DispatchOutcome"):
        super().__init__(outcome.rawErrorMessage or "All notification tiers failed")
        self.outcome = outcome
