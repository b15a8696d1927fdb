from enum import Enum
from typing import List, NamedTuple, Optional

from firebase_admin import messaging
from pydantic import BaseModel


class TierName(str, Enum):
    FULL = "full"
    SIMPLIFIED = "simplified"
    MINIMAL = "minimal"
    NONE = "none"


class ErrorCategory(str, Enum):
    INVALID_TOKEN = "InvalidToken"
    WRONG_CREDENTIAL = "WrongCredential"
    INVALID_ARGUMENT = "InvalidArgument"
    TIMEOUT = "Timeout"
    CLIENT_UNAVAILABLE = "ClientUnavailable"
    UNKNOWN = "Unknown"


class ValidationCode(str, Enum):
    MISSING_TOKEN = "MissingToken"
    MISSING_TEXT = "MissingText"
    INVALID_BODY = "InvalidBody"


class Diagnostic(str, Enum):
    SHORT_TOKEN = "ShortToken"


class NotificationRequest(BaseModel):
    """A chat message to be pushed to one device"""
    receiverToken: str
    messageText: str
    senderName: str = ""
    senderId: str = ""
    chatId: str = ""


class ValidationResult(NamedTuple):
    request: NotificationRequest
    diagnostics: List[Diagnostic]


class MessageTier(NamedTuple):
    name: TierName
    message: messaging.Message


class TierAttempt(BaseModel):
    tier: TierName
    succeeded: bool
    errorCategory: Optional[ErrorCategory] = None
    errorMessage: Optional[str] = None


class DispatchOutcome(BaseModel):
    succeeded: bool
    tierUsed: TierName = TierName.NONE
    providerMessageId: Optional[str] = None
    errorCategory: Optional[ErrorCategory] = None
    rawErrorMessage: Optional[str] = None
    attempts: List[TierAttempt] = []

    @property
    def degraded(self) -> bool:
        return self.succeeded and self.tierUsed != TierName.FULL
