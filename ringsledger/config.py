from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "RingsLedger"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/ringsledger"

    # Shared household passcode; empty means login is not configured
    family_passcode: str = ""

    session_cookie_name: str = "lotr_family_session"
    session_max_age_seconds: int = 60 * 60 * 24 * 30
    session_cookie_secure: bool = False

    ringsdb_base_url: str = "https://ringsdb.com"
    ringsdb_timeout: float = 30.0

    # Packs enabled the first time the catalog is synced
    default_enabled_packs: list[str] = ["Core", "DoG", "DoD", "EoL", "RoR", "TBR", "TRD"]


settings = Settings()


# =============================================================================
# DECK LIMITS
# =============================================================================

MAX_DECK_HEROES = 3

# Card quantities must fit a 32-bit INTEGER column
MAX_CARD_QTY = 2**31 - 1


# =============================================================================
# LOOKUP LIMITS
# =============================================================================

# Max card codes accepted by owned/usage lookups in one request
MAX_CODE_LOOKUP = 200

# Max distinct hero codes resolved for the latest-run view
MAX_HERO_NAME_LOOKUPS = 24


# =============================================================================
# CAMPAIGN AUTOSAVE
# =============================================================================

# Quiet period after the last edit before a save is sent
AUTOSAVE_DEBOUNCE_SECONDS = 0.8

# A save still in flight after this long is aborted and reported
AUTOSAVE_TIMEOUT_SECONDS = 15.0
