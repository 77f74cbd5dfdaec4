"""Recalculate cached goal progress from the transaction ledger.

Usage:
    # All goals
    python scripts/recalculate.py

    # Specific goals
    python scripts/recalculate.py --goal-id <id> --goal-id <id>

    # Against another database
    python scripts/recalculate.py --mongodb-url mongodb://host:27017 --db-name goal_tracker
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from motor.motor_asyncio import AsyncIOMotorClient
from app.config import settings
from app.exceptions import GoalNotFoundError
from app.logging_config import setup_logging
from app.services.goal_service import GoalService

logger = logging.getLogger("recalculate")


async def recalculate(mongodb_url: str, db_name: str, goal_ids: list[str]) -> int:
    """
    Recalculate progress and report the outcome.

    Returns:
        Process exit code: 0 when every goal was recalculated, 1 otherwise
    """
    client = AsyncIOMotorClient(mongodb_url, serverSelectionTimeoutMS=settings.mongodb_timeout_ms)
    service = GoalService(client[db_name])

    try:
        if not goal_ids:
            result = await service.recalculate_all()
            for goal_id in result.failed:
                logger.error("Failed: %s", goal_id)
            return 1 if result.failed else 0

        exit_code = 0
        for goal_id in goal_ids:
            try:
                goal = await service.recalculate_goal(goal_id)
            except GoalNotFoundError:
                logger.error("Goal not found: %s", goal_id)
                exit_code = 1
            else:
                logger.info(
                    "%s (#%s): %d / %d",
                    goal.name,
                    goal.tag_pattern,
                    goal.current_amount,
                    goal.target_amount,
                )
        return exit_code
    finally:
        client.close()


def main() -> None:
    """Parse arguments and run."""
    parser = argparse.ArgumentParser(description="Recalculate goal progress")
    parser.add_argument("--mongodb-url", default=settings.mongodb_url, help="MongoDB connection URL")
    parser.add_argument("--db-name", default=settings.mongodb_db_name, help="Database name")
    parser.add_argument(
        "--goal-id",
        action="append",
        default=[],
        help="Goal to recalculate (repeatable); all goals when omitted",
    )
    parser.add_argument("--verbose", action="store_true", help="Log each goal's result")
    args = parser.parse_args()

    setup_logging(level="DEBUG" if args.verbose else None)
    sys.exit(asyncio.run(recalculate(args.mongodb_url, args.db_name, args.goal_id)))


if __name__ == "__main__":
    main()
