from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    GEOPRESS_API_URL: str = "https://geopressci-b55css5d.b4a.run/api/v1"
    API_TIMEOUT_SECONDS: float = 30.0

    MAPBOX_ACCESS_TOKEN: str | None = None
    MAPBOX_BASE_URL: str = "https://api.mapbox.com"
    MAPBOX_TIMEOUT_SECONDS: float = 10.0

    GEOLOCATION_TIMEOUT_SECONDS: float = 15.0
    GEOLOCATION_FALLBACK_TO_IP: bool = True

    SEARCH_DEBOUNCE_SECONDS: float = 0.3
    SEARCH_RADIUS_KM: float = 50.0

    DEFAULT_LATITUDE: float = 5.3364
    DEFAULT_LONGITUDE: float = -4.0267

    STORE_PROVIDER: str = "memory"
    STORE_DATA_DIR: str = "./data/client_state"

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"


settings = Settings()
