from fastapi import Depends, Request

from .firebase import MessagingClientProvider
from .notifications.dispatcher import NotificationDispatcher


def get_messaging_provider(request: Request) -> MessagingClientProvider:
    """Return the messaging client provider created at application startup."""
    return request.app.state.messaging_provider


def get_dispatcher(
    request: Request,
    provider: MessagingClientProvider = Depends(get_messaging_provider),
) -> NotificationDispatcher:
    return NotificationDispatcher(provider, timeout=request.app.state.settings.send_timeout_seconds)
