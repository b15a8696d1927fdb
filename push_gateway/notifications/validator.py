import logging
from typing import Any

from ..errors import ValidationError
from .schemas import Diagnostic, NotificationRequest, ValidationCode, ValidationResult

logger = logging.getLogger(__name__)

# FCM registration tokens are normally well above this length
MIN_PLAUSIBLE_TOKEN_LENGTH = 100

OPTIONAL_FIELDS = ('senderName', 'senderId', 'chatId')


def _text_field(body: dict, key: str) -> str:
    value = body.get(key)
    if not isinstance(value, str):
        return ''
    return value.strip()


def validate_notification_request(body: Any) -> ValidationResult:
    """
    Validate a raw send-notification body.

    Args:
        body: Decoded JSON request body

    Returns:
        The validated request and any non-fatal diagnostics

    Raises:
        ValidationError: If the body is not an object or lacks receiverToken or messageText
    """
    if not isinstance(body, dict):
        raise ValidationError(ValidationCode.INVALID_BODY.value, "Request body must be a JSON object")

    token = _text_field(body, 'receiverToken')
    if not token:
        raise ValidationError(ValidationCode.MISSING_TOKEN.value, "receiverToken (device token) is required")

    text = _text_field(body, 'messageText')
    if not text:
        raise ValidationError(ValidationCode.MISSING_TEXT.value, "messageText is required")

    optional = {
        key: body[key] if isinstance(body.get(key), str) else ''
        for key in OPTIONAL_FIELDS
    }
    request = NotificationRequest(receiverToken=token, messageText=body['messageText'], **optional)

    diagnostics = []
    if len(token) < MIN_PLAUSIBLE_TOKEN_LENGTH:
        logger.warning(f"receiverToken is only {len(token)} characters, delivery may fail")
        diagnostics.append(Diagnostic.SHORT_TOKEN)

    return ValidationResult(request=request, diagnostics=diagnostics)
