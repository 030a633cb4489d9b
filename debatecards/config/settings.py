from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv, find_dotenv
from os import getenv
from typing import List, Optional

_env_path = find_dotenv()  # locate a .env file in this folder or parent folders
if _env_path:
    load_dotenv(_env_path)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore")

    # Link probing
    PROBE_TIMEOUT: float = 8.0
    # extra codes counted as reachable on top of every 2xx/3xx
    PROBE_ACCEPTABLE_STATUSES: List[int] = [401, 403, 405]
    PROBE_VERIFY_TLS: bool = True
    DOI_RESOLVER_BASE: str = "https://doi.org"

    # AI gateway
    # Key may be unset in environments where card generation isn't configured.
    AI_GATEWAY_URL: str = "https://ai.gateway.lovable.dev/v1"
    AI_GATEWAY_API_KEY: Optional[str] = getenv('AI_GATEWAY_API_KEY') or getenv('LOVABLE_API_KEY')
    AI_MODEL: str = "google/gemini-2.5-flash"
    AI_TIMEOUT: float = 60.0

    # Web
    CORS_ALLOW_ORIGINS: List[str] = ["*"]
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = getenv('LOG_LEVEL', 'INFO')


settings = Settings()
