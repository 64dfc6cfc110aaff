"""Create the local data directory and migrate the activities table."""
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config import get_settings
from app.database import run_migrations
from app.logging_config import configure_logging


logger = logging.getLogger("scripts.initial_setup")


def main() -> None:
    configure_logging()
    settings = get_settings()
    if settings.database_url.startswith("sqlite:///"):
        Path("data").mkdir(exist_ok=True)
    run_migrations()
    logger.info("Activity store ready (%s)", settings.database_url.split("@")[-1])
    if not settings.ai_motivation_available:
        logger.warning("AI motivation is off (flag disabled or OPENROUTER_API_KEY unset); fallback messages only")


if __name__ == "__main__":
    main()
