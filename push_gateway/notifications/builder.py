import time
from typing import Optional, Tuple

from firebase_admin import messaging

from .schemas import MessageTier, NotificationRequest, TierName

MAX_BODY_LENGTH = 100
DEFAULT_TITLE = "New message"
MESSAGE_TYPE = "new_message"
CLICK_ACTION = "OPEN_CHAT"
ANDROID_CHANNEL_ID = "chat_messages"
DEFAULT_SOUND = "default"
DIAGNOSTIC_MARKER = {"diagnostic": "minimal_tier"}


def truncate_body(text: str) -> str:
    if len(text) > MAX_BODY_LENGTH:
        return text[:MAX_BODY_LENGTH] + '...'
    return text


def build_message_tiers(request: NotificationRequest, now: Optional[float] = None) -> Tuple[MessageTier, ...]:
    """
    Build the FCM messages for a request, ordered from richest to simplest.

    Args:
        request: Validated notification request
        now: Send time in seconds since the epoch, defaults to the current time

    Returns:
        The full, simplified and minimal tiers in that order
    """
    token = request.receiverToken.strip()
    title = request.senderName or DEFAULT_TITLE
    body = truncate_body(request.messageText)
    timestamp = str(int((time.time() if now is None else now) * 1000))

    full = messaging.Message(
        token=token,
        notification=messaging.Notification(title=title, body=body),
        data={
            'senderId': request.senderId,
            'chatId': request.chatId,
            'type': MESSAGE_TYPE,
            'timestamp': timestamp,
            'click_action': CLICK_ACTION,
        },
        android=messaging.AndroidConfig(
            priority='high',
            notification=messaging.AndroidNotification(
                sound=DEFAULT_SOUND,
                channel_id=ANDROID_CHANNEL_ID,
                click_action=CLICK_ACTION,
            ),
        ),
        apns=messaging.APNSConfig(
            headers={'apns-priority': '10'},
            payload=messaging.APNSPayload(aps=messaging.Aps(sound=DEFAULT_SOUND)),
        ),
    )

    simplified = messaging.Message(
        token=token,
        notification=messaging.Notification(title=title, body=body),
        data={
            'senderId': request.senderId,
            'chatId': request.chatId,
        },
    )

    # Data-only, nothing visible on the device
    minimal = messaging.Message(
        token=token,
        data=dict(DIAGNOSTIC_MARKER),
    )

    return (
        MessageTier(TierName.FULL, full),
        MessageTier(TierName.SIMPLIFIED, simplified),
        MessageTier(TierName.MINIMAL, minimal),
    )
