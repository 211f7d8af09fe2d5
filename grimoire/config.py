from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "Grimoire"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "postgresql+asyncpg://localhost:5432/grimoire"

    scryfall_api_url: str = "https://api.scryfall.com"
    scryfall_timeout: float = 30.0


settings = Settings()


# =============================================================================
# DECK CONSTRUCTION LIMITS
# =============================================================================

# Sideboard holds at most this many cards, regardless of inventory
SIDEBOARD_MAX_SIZE = 15

# Mana values at or above this fold into the "7+" curve bucket
MANA_CURVE_TOP_BUCKET = 7


# =============================================================================
# CARD CATALOG
# =============================================================================

# Scryfall accepts at most 75 identifiers per /cards/collection request
SCRYFALL_BATCH_SIZE = 75

SCRYFALL_USER_AGENT = "Grimoire/1.0"
