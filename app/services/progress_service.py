"""Progress service - aggregates tagged ledger amounts into goal progress."""
import logging

from app.services.goal_store import GoalStore, wrap_store_errors
from app.utils.tags import matches_tag, tag_filter

logger = logging.getLogger(__name__)


class ProgressService:
    """Computes and caches each goal's current_amount."""

    def __init__(self, db, store: GoalStore | None = None):
        """Initialize service with database connection."""
        self.db = db
        self.transactions = db["transactions"]
        self.store = store or GoalStore(db)

    @wrap_store_errors
    async def sum_tagged_contributions(self, tag_pattern: str) -> int:
        """
        Sum the positive amounts of live transactions tagged for a goal.

        Outflows (e.g. the debit leg of a transfer) are ignored rather than
        subtracted.

        Args:
            tag_pattern: Goal tag pattern

        Returns:
            Total in minor currency units
        """
        query = tag_filter(tag_pattern)
        query["amount"] = {"$gt": 0}

        cursor = self.transactions.find(
            query,
            {"amount": 1, "notes": 1, "imported_description": 1},
        )
        docs = await cursor.to_list(length=None)

        return sum(
            doc["amount"]
            for doc in docs
            if doc["amount"] > 0
            and matches_tag(tag_pattern, doc.get("notes"), doc.get("imported_description"))
        )

    async def compute_progress(self, goal_id: str) -> int:
        """
        Recompute and store a goal's current_amount.

        Args:
            goal_id: Goal ID

        Returns:
            The computed amount, or 0 if the goal is absent or deleted
        """
        goal = await self.store.get_goal(goal_id)
        if goal is None:
            return 0

        total = await self.sum_tagged_contributions(goal.tag_pattern)
        await self.store.set_current_amount(goal_id, total)

        logger.debug("Goal %s progress recomputed: %d", goal_id, total)
        return total
