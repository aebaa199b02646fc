from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Overpass provider
    OVERPASS_URL: str = "https://overpass-api.de/api/interpreter"
    OVERPASS_USER_AGENT: str = "SpipUniform/1.0"
    OVERPASS_QUERY_TIMEOUT: int = 25  # seconds, goes into the QL prologue
    OVERPASS_HTTP_TIMEOUT: float = 30.0

    # Rate limiting and retries
    MIN_REQUEST_INTERVAL_MS: int = 500
    MAX_RETRIES: int = 3
    INITIAL_RETRY_DELAY_MS: int = 1000
    MAX_RETRY_DELAY_MS: int = 10000

    # Cache lifetimes
    BOUNDS_CACHE_TTL_MINUTES: int = 60
    TOWNS_CACHE_TTL_MINUTES: int = 5
    SEARCH_CACHE_TTL_MINUTES: int = 20

    # Below this many area results the bounding box query is tried as well
    MIN_AREA_RESULTS: int = 10
    # Initial dropdown load on /localities/search when no query is given
    INITIAL_LOCALITY_LIMIT: int = 20
    # Shorter search text falls back to that initial listing
    MIN_SEARCH_TEXT_LENGTH: int = 2

    # Local storage for the bulk locality import
    DATA_DIR: str = "data"

    LOGGER: int = 20
    LOGGER_NAME: str = "SPIP-GEO"
    LOG_DIRECTORY: str = "logs"
    LOG_FILE: str = "geo.log"

    model_config = SettingsConfigDict(
        # Look for .env in the current folder OR the parent folder
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        extra="ignore"
    )

settings = Settings()
