import asyncio
import logging
from enum import Enum
from typing import Optional, Sequence, Tuple

from firebase_admin.exceptions import FirebaseError

from ..firebase import MessagingClientProvider
from .schemas import DispatchOutcome, ErrorCategory, MessageTier, TierAttempt, TierName

logger = logging.getLogger(__name__)

# FCM error codes, both the Python SDK's canonical codes and the legacy names
ERROR_CODE_CATEGORIES = {
    'NOT_FOUND': ErrorCategory.INVALID_TOKEN,
    'UNREGISTERED': ErrorCategory.INVALID_TOKEN,
    'registration-token-not-registered': ErrorCategory.INVALID_TOKEN,
    'invalid-registration-token': ErrorCategory.INVALID_TOKEN,
    'messaging/registration-token-not-registered': ErrorCategory.INVALID_TOKEN,
    'messaging/invalid-registration-token': ErrorCategory.INVALID_TOKEN,
    'SENDER_ID_MISMATCH': ErrorCategory.WRONG_CREDENTIAL,
    'PERMISSION_DENIED': ErrorCategory.WRONG_CREDENTIAL,
    'UNAUTHENTICATED': ErrorCategory.WRONG_CREDENTIAL,
    'mismatched-credential': ErrorCategory.WRONG_CREDENTIAL,
    'messaging/mismatched-credential': ErrorCategory.WRONG_CREDENTIAL,
    'INVALID_ARGUMENT': ErrorCategory.INVALID_ARGUMENT,
    'invalid-argument': ErrorCategory.INVALID_ARGUMENT,
    'messaging/invalid-argument': ErrorCategory.INVALID_ARGUMENT,
}


def classify_error_code(code: Optional[str]) -> ErrorCategory:
    return ERROR_CODE_CATEGORIES.get(code, ErrorCategory.UNKNOWN)


def classify_error(error: BaseException) -> ErrorCategory:
    if isinstance(error, asyncio.TimeoutError):
        return ErrorCategory.TIMEOUT
    if isinstance(error, FirebaseError):
        return classify_error_code(error.code)
    # firebase_admin rejects malformed message fields locally with ValueError
    if isinstance(error, ValueError):
        return ErrorCategory.INVALID_ARGUMENT
    return classify_error_code(getattr(error, 'code', None))


class DispatchState(str, Enum):
    NOT_READY = "not_ready"
    ATTEMPTING_TIER = "attempting_tier"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


TERMINAL_STATES = (DispatchState.SUCCEEDED, DispatchState.EXHAUSTED)


def initial_state(client_ready: bool) -> Tuple[DispatchState, int]:
    if client_ready:
        return DispatchState.ATTEMPTING_TIER, 0
    return DispatchState.NOT_READY, 0


def transition(state: DispatchState, index: int, tier_count: int,
               send_succeeded: bool = False) -> Tuple[DispatchState, int]:
    """
    Compute the next dispatch state.

    Args:
        state: Current state
        index: Index of the tier attempted in the current state
        tier_count: Number of tiers available
        send_succeeded: Result of the send attempt at index

    Returns:
        The next state and the tier index it refers to
    """
    if state in TERMINAL_STATES:
        return state, index
    if state == DispatchState.NOT_READY:
        return DispatchState.EXHAUSTED, index
    if send_succeeded:
        return DispatchState.SUCCEEDED, index
    if index + 1 < tier_count:
        return DispatchState.ATTEMPTING_TIER, index + 1
    return DispatchState.EXHAUSTED, index


class NotificationDispatcher:
    """Sends message tiers in order until FCM accepts one."""

    def __init__(self, provider: MessagingClientProvider, timeout: Optional[float] = None):
        """
        Initialize the dispatcher.

        Args:
            provider: Shared messaging client provider
            timeout: Per-attempt timeout in seconds, None for no limit
        """
        self.provider = provider
        self.timeout = timeout

    async def _send(self, client, tier: MessageTier) -> str:
        # firebase_admin sends are blocking HTTP calls
        return await asyncio.wait_for(
            asyncio.to_thread(client.send, tier.message),
            timeout=self.timeout
        )

    async def dispatch(self, tiers: Sequence[MessageTier]) -> DispatchOutcome:
        if not tiers:
            raise ValueError("No message tiers to dispatch")

        client = self.provider.get_client()
        state, index = initial_state(client is not None)

        if state == DispatchState.NOT_READY:
            state, index = transition(state, index, len(tiers))
            reason = self.provider.last_error or "Messaging client is not available"
            logger.error(f"Cannot dispatch notification: {reason}")
            return DispatchOutcome(
                succeeded=False,
                errorCategory=ErrorCategory.CLIENT_UNAVAILABLE,
                rawErrorMessage=reason
            )

        attempts = []
        message_id = None
        while state == DispatchState.ATTEMPTING_TIER:
            tier = tiers[index]
            try:
                message_id = await self._send(client, tier)
                attempts.append(TierAttempt(tier=tier.name, succeeded=True))
                logger.info(f"Sent {tier.name.value} notification tier: {message_id}")
                succeeded = True
            except Exception as e:
                category = classify_error(e)
                if category == ErrorCategory.TIMEOUT:
                    # The worker thread keeps running; a late FCM accept can still deliver this tier
                    logger.warning(f"{tier.name.value} tier timed out after {self.timeout}s, the send may still be delivered")
                error_message = str(e) or type(e).__name__
                attempts.append(TierAttempt(
                    tier=tier.name,
                    succeeded=False,
                    errorCategory=category,
                    errorMessage=error_message
                ))
                logger.warning(f"FCM rejected {tier.name.value} tier ({category.value}): {error_message}")
                succeeded = False
            state, index = transition(state, index, len(tiers), succeeded)

        if state == DispatchState.SUCCEEDED:
            if index > 0:
                logger.warning(f"Notification delivered with degraded tier {tiers[index].name.value}")
            return DispatchOutcome(
                succeeded=True,
                tierUsed=tiers[index].name,
                providerMessageId=message_id,
                attempts=attempts
            )

        last = attempts[-1]
        logger.error(f"All notification tiers failed, last error ({last.errorCategory.value}): {last.errorMessage}")
        return DispatchOutcome(
            succeeded=False,
            tierUsed=TierName.NONE,
            errorCategory=last.errorCategory,
            rawErrorMessage=last.errorMessage,
            attempts=attempts
        )
