from typing import Optional

from fastapi import status
from fastapi.responses import JSONResponse

from ..errors import ConfigError, DispatchError, ValidationError
from .schemas import DispatchOutcome, ErrorCategory

DISPATCH_GUIDANCE = (
    "InvalidToken: the device token is invalid or no longer registered, ask the app for a fresh FCM token. "
    "WrongCredential: the service account does not belong to the Firebase project that issued the token. "
    "InvalidArgument: FCM rejected the message fields, check the request values. "
    "Timeout: FCM did not answer in time, try again later. "
    "Unknown: see the error message for details."
)

CONFIG_GUIDANCE = "Set FIREBASE_SERVICE_ACCOUNT to the service account JSON of your Firebase project"


def format_success(outcome: DispatchOutcome) -> JSONResponse:
    content = {
        'success': True,
        'message': 'Notification sent',
        'messageId': outcome.providerMessageId,
        'tierUsed': outcome.tierUsed.value,
    }
    if outcome.degraded:
        content['degraded'] = True
    return JSONResponse(status_code=status.HTTP_200_OK, content=content)


def format_dispatch_error(error: DispatchError) -> JSONResponse:
    outcome = error.outcome
    category = outcome.errorCategory or ErrorCategory.UNKNOWN
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            'success': False,
            'error': outcome.rawErrorMessage or 'All notification tiers failed',
            'code': 'DispatchError',
            'errorType': category.value,
            'guidance': DISPATCH_GUIDANCE,
        }
    )


def format_validation_error(error: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            'success': False,
            'error': error.code,
            'code': 'ValidationError',
            'message': error.message,
        }
    )


def format_config_error(error: ConfigError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            'success': False,
            'error': f"Firebase is not configured: {str(error)}",
            'code': 'ConfigError',
            'guidance': CONFIG_GUIDANCE,
        }
    )


def format_unexpected_error(error: Exception, code: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            'success': False,
            'error': str(error) or type(error).__name__,
            'code': code or 'UNKNOWN',
        }
    )


def format_method_not_allowed() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        content={
            'success': False,
            'error': 'Method not supported, use GET or POST',
        }
    )
