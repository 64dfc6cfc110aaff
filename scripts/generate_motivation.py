"""Generate a motivational message for one user from the command line."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import date
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config import get_settings
from app.database import SessionLocal
from app.logging_config import configure_logging
from app.models.schemas import GenerationOptions
from app.services.activity_repository import ActivityRepository
from app.services.activity_stats import aggregate_activity_stats
from app.services.errors import DataAccessError, ValidationError
from app.services.motivation_service import MotivationService, create_motivation_service


logger = logging.getLogger("scripts.generate_motivation")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate an AI motivational message for a user's month",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Current month, kilometres
  python scripts/generate_motivation.py --user-id 3f1c...

  # A past month in miles, ignoring the cache
  python scripts/generate_motivation.py --user-id 3f1c... --month 2025-02 --unit mi --bypass-cache

  # Only verify the OpenRouter credential
  python scripts/generate_motivation.py --check-connection
        """
    )
    parser.add_argument("--user-id", type=str, help="User whose activities are summarised")
    parser.add_argument(
        "--month",
        type=str,
        help="Month to summarise (YYYY-MM). Defaults to the current month."
    )
    parser.add_argument("--unit", choices=("km", "mi"), default="km", help="Distance unit for the prompt")
    parser.add_argument("--model", type=str, help="Override the configured model")
    parser.add_argument("--bypass-cache", action="store_true", help="Always call the model")
    parser.add_argument(
        "--check-connection",
        action="store_true",
        help="Send a minimal request to OpenRouter and exit"
    )
    args = parser.parse_args(argv)
    if not args.check_connection and not args.user_id:
        parser.error("--user-id is required unless --check-connection is given")
    return args


def parse_month(value: str | None) -> date:
    if not value:
        return date.today()
    year, month = value.split("-", 1)
    return date(int(year), int(month), 1)


async def run(args: argparse.Namespace, service: MotivationService, repository: ActivityRepository) -> int:
    if args.check_connection:
        if service.client is None:
            logger.error("AI motivation is disabled (feature flag off or no API key)")
            return 1
        ok = await service.client.test_connection()
        logger.info("OpenRouter connection %s", "OK" if ok else "FAILED")
        return 0 if ok else 1

    try:
        reference = parse_month(args.month)
    except ValueError:
        logger.error("Invalid --month %r, expected YYYY-MM", args.month)
        return 2

    try:
        stats = aggregate_activity_stats(repository.fetch_activities, args.user_id, reference, args.unit)
    except DataAccessError as e:
        logger.error("Could not read activities: %s", e)
        return 1

    try:
        message = await service.generate_motivational_message(
            args.user_id,
            stats,
            GenerationOptions(model=args.model, bypass_cache=args.bypass_cache),
        )
    except ValidationError as e:
        logger.error("Rejected statistics for %s: %s", args.month or "current month", e)
        return 2
    logger.info("[%s | %s%s] %s", message.tone, message.model, ", cached" if message.cached else "", message.message)
    return 0


async def _main(args: argparse.Namespace) -> int:
    service = create_motivation_service(get_settings())
    try:
        return await run(args, service, ActivityRepository(SessionLocal))
    finally:
        await service.aclose()


def main() -> None:
    configure_logging()
    args = parse_args()
    sys.exit(asyncio.run(_main(args)))


if __name__ == "__main__":
    main()
