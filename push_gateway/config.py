from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration settings for the push notification gateway"""

    # Application settings
    service_name: str = "push-gateway"
    environment: str = "dev"
    log_level: str = "INFO"
    log_json: bool = True
    path_prefix: str = ''

    # Firebase settings
    firebase_service_account: Optional[str] = None

    # Dispatch settings
    send_timeout_seconds: float = 10.0  # per tier attempt

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


settings = Settings()


def get_prefix(api_version: str = '', path_prefix: Optional[str] = None) -> str:
    if path_prefix is None:
        path_prefix = settings.path_prefix
    if not path_prefix.startswith('/'):
        path_prefix = f'/{path_prefix}'
    if path_prefix.endswith('/'):
        path_prefix = path_prefix.rstrip('/')
    return f'{path_prefix}{api_version}'
