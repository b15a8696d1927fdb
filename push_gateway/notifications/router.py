import json
import logging
from datetime import datetime, timezone
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, Response

from ..dependencies import get_dispatcher, get_messaging_provider
from ..errors import ConfigError, DispatchError, ValidationError
from ..firebase import MessagingClientProvider
from .builder import build_message_tiers
from .dispatcher import NotificationDispatcher
from .responses import format_success
from .schemas import ErrorCategory, ValidationCode
from .validator import validate_notification_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix='/api', tags=["Notifications"])

SEND_NOTIFICATION_PATH = '/send-notification'


async def _read_json_body(request: Request) -> Any:
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError(ValidationCode.INVALID_BODY.value, "Request body is not valid JSON")


@router.get(SEND_NOTIFICATION_PATH)
async def notification_status(
    provider: Annotated[MessagingClientProvider, Depends(get_messaging_provider)]
):
    """
    Health check reporting whether Firebase messaging is ready
    """
    return {
        'success': True,
        'message': 'Notification server is running',
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'firebase': 'ready' if provider.is_ready else 'not-ready',
        'instruction': 'Send a POST request with receiverToken, senderName and messageText',
    }


@router.options(SEND_NOTIFICATION_PATH)
async def notification_preflight():
    return Response(status_code=200)


@router.post(SEND_NOTIFICATION_PATH)
async def send_notification(
    request: Request,
    dispatcher: Annotated[NotificationDispatcher, Depends(get_dispatcher)]
):
    """
    Push a chat message notification to a single device
    """
    body = await _read_json_body(request)
    validated = validate_notification_request(body)
    notification = validated.request

    logger.info(f"Sending notification from {notification.senderName or 'anonymous'}")

    tiers = build_message_tiers(notification)
    outcome = await dispatcher.dispatch(tiers)

    if outcome.succeeded:
        return format_success(outcome)
    if outcome.errorCategory == ErrorCategory.CLIENT_UNAVAILABLE:
        raise ConfigError(outcome.rawErrorMessage)
    raise DispatchError(outcome)


@router.get('/test', tags=["Dev test"])
async def smoke_test():
    return {
        'success': True,
        'message': 'Test endpoint is working',
        'serverTime': datetime.now(timezone.utc).isoformat(),
        'endpoints': {
            'main': f'POST /api{SEND_NOTIFICATION_PATH}',
            'test': 'GET /api/test',
        },
    }
