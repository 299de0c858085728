from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the IP locator.

    Values are read from `IP_LOCATOR_*` environment variables or a local `.env`
    file, e.g. `IP_LOCATOR_LOG_LEVEL=DEBUG`.
    """

    model_config = SettingsConfigDict(
        env_prefix="IP_LOCATOR_",
        env_file=".env",
        extra="ignore",
    )

    log_level: str = "INFO"  # DEBUG, WARNING, ERROR

    provider_base_url: str = "https://ipwho.is"

    # Map panel
    tile_url_template: str = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
    tile_attribution: str = "&copy; OpenStreetMap contributors"
    map_zoom: int = 13
    satellite_map_base_url: str = "https://www.google.com/maps"

    # Per-browser view state
    session_cookie_name: str = "ip_locator_session"
    max_sessions: int = 1000

    host: str = "127.0.0.1"
    port: int = 8000
    reload: bool = False


settings = Settings()
