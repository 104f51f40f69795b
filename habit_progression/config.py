"""Configuration management"""
import logging
import os
from dotenv import load_dotenv

load_dotenv()

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# Degradation
# - 'strict' (default): weekend days count toward days missed
# - 'relaxed': Saturdays and Sundays are skipped when counting
DEGRADATION_MODE: str = os.getenv("DEGRADATION_MODE", "strict").lower()

# Stat safety envelope (display/storage/export limit, not a gameplay cap)
STAT_SAFE_MAX: float = float(os.getenv("STAT_SAFE_MAX", "999999"))

# Activity input limits
MAX_ACTIVITY_MINUTES: int = int(os.getenv("MAX_ACTIVITY_MINUTES", "1440"))

# Monitoring
ENABLE_PROMETHEUS: bool = os.getenv("ENABLE_PROMETHEUS", "true").lower() == "true"


# Validation
def validate_config() -> None:
    """Validate configuration values"""
    if DEGRADATION_MODE not in ("strict", "relaxed"):
        raise ValueError("DEGRADATION_MODE must be 'strict' or 'relaxed'")
    if STAT_SAFE_MAX <= 1.0:
        raise ValueError("STAT_SAFE_MAX must be greater than 1.0")
    if MAX_ACTIVITY_MINUTES <= 0:
        raise ValueError("MAX_ACTIVITY_MINUTES must be positive")
    if not isinstance(logging.getLevelName(LOG_LEVEL.upper()), int):
        raise ValueError(f"Unknown LOG_LEVEL: {LOG_LEVEL}")


def configure_logging() -> None:
    """Configure root logging for hosts embedding the engine"""
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO)
    )
