import logging
import threading
from typing import Optional

import firebase_admin
from firebase_admin import credentials, messaging

from ..errors import ConfigError
from .credentials import load_service_account

logger = logging.getLogger(__name__)


class MessagingClient:
    """Handle on an initialized Firebase app used for FCM sends."""

    def __init__(self, app: firebase_admin.App):
        self.app = app

    def send(self, message: messaging.Message) -> str:
        """Send one message through FCM and return the provider message id."""
        return messaging.send(message, app=self.app)


class MessagingClientProvider:
    """
    Creates the process-wide MessagingClient at most once.

    The provider is built at startup and shared by reference. The client is
    initialized lazily on the first get_client() call; once it exists it is
    returned as-is, even if the credential setting changes afterwards.
    """

    def __init__(self, service_account_json: Optional[str], app_name: str = firebase_admin._DEFAULT_APP_NAME):
        self.service_account_json = service_account_json
        self.app_name = app_name
        self.last_error: Optional[str] = None
        self._client: Optional[MessagingClient] = None
        self._lock = threading.Lock()

    @property
    def is_ready(self) -> bool:
        return self.get_client() is not None

    def get_client(self) -> Optional[MessagingClient]:
        """
        Get the initialized messaging client.

        Returns:
            The memoized client, or None if Firebase could not be initialized
        """
        if self._client is not None:
            return self._client

        with self._lock:
            if self._client is not None:
                return self._client
            try:
                self._client = MessagingClient(self._connect())
                self.last_error = None
            except ConfigError as e:
                logger.error(f"Firebase is not configured: {str(e)}")
                self.last_error = str(e)
            except Exception as e:
                logger.error(f"Failed to initialize Firebase: {str(e)}")
                self.last_error = f"Failed to initialize Firebase: {str(e)}"
            return self._client

    def _connect(self) -> firebase_admin.App:
        cert_dict = load_service_account(self.service_account_json)
        try:
            # Reuse an app registered under the same name by another component
            app = firebase_admin.get_app(self.app_name)
            logger.info(f"Retrieved existing Firebase app: {app.name}")
            return app
        except ValueError:
            pass

        cred = credentials.Certificate(cert_dict)
        app = firebase_admin.initialize_app(credential=cred, name=self.app_name)
        logger.info(f"Firebase app initialized for project {cert_dict.get('project_id')}")
        return app
