import json
import logging
from typing import Any, Dict, Optional

from ..errors import ConfigError

logger = logging.getLogger(__name__)

REQUIRED_PROJECT_FIELD = 'project_id'


def load_service_account(raw: Optional[str]) -> Dict[str, Any]:
    """
    Parse a service-account credential from its JSON configuration string.

    Args:
        raw: Value of the FIREBASE_SERVICE_ACCOUNT setting

    Returns:
        The parsed credential dictionary

    Raises:
        ConfigError: If the value is empty, is not a JSON object or has no project_id
    """
    if raw is None or not raw.strip():
        raise ConfigError("FIREBASE_SERVICE_ACCOUNT is not set")

    try:
        cert_dict = json.loads(raw)
        # Secrets are sometimes stored as a JSON-encoded string
        if isinstance(cert_dict, str):
            cert_dict = json.loads(cert_dict)
    except json.JSONDecodeError as e:
        raise ConfigError(f"FIREBASE_SERVICE_ACCOUNT is not valid JSON: {e.msg}") from e

    if not isinstance(cert_dict, dict):
        raise ConfigError("FIREBASE_SERVICE_ACCOUNT must be a JSON object")

    if not cert_dict.get(REQUIRED_PROJECT_FIELD):
        raise ConfigError(f"FIREBASE_SERVICE_ACCOUNT has no {REQUIRED_PROJECT_FIELD}")

    return cert_dict
