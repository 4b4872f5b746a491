from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized configuration.

    Loaded from:
    - environment variables
    - .env file (if present)
    """
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Without a key the provider answers 401, which surfaces as a RemoteError
    openweather_api_key: str = ""

    weather_api_url: str = "https://api.openweathermap.org/data/2.5/weather"
    locations_api_url: str = "https://jsonplaceholder.typicode.com/posts"
    units: str = "metric"

    http_timeout_s: float = 10.0

    # Sent as `_limit` when refreshing the saved-locations collection
    refresh_limit: Optional[int] = None

    log_level: str = "INFO"
    app_name: str = "Weather Locations"


settings = Settings()
