from .client import MessagingClient, MessagingClientProvider
from .credentials import load_service_account

__all__ = ['MessagingClient', 'MessagingClientProvider', 'load_service_account']
