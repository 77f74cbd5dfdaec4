"""Undo service - records goal mutations and reverts the latest one."""
import logging
from datetime import datetime
from typing import Optional

from bson import ObjectId

from app.services.goal_store import GoalStore, wrap_store_errors
from app.services.progress_service import ProgressService

logger = logging.getLogger(__name__)

ACTIONS = ("create", "update", "delete")


class UndoService:
    """
    Command log for goal mutations.

    Each entry holds the goal document as it was before the mutation, so
    undoing is a matter of putting that document back. A create has no
    prior document and is undone by tombstoning the new goal.
    """

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.mutations = db["goal_mutations"]
        self.store = GoalStore(db)
        self.progress = ProgressService(db, store=self.store)

    @wrap_store_errors
    async def record(self, goal_id: str, action: str) -> Optional[ObjectId]:
        """
        Capture the pre-image of a goal about to be mutated.

        Args:
            goal_id: Goal ID
            action: One of create, update, delete

        Returns:
            ID of the mutation entry, or None when there is nothing to revert
        """
        if action not in ACTIONS:
            raise ValueError(f"Unknown mutation action: {action}")

        before = None
        if action != "create":
            before = await self.store.get_raw(goal_id)
            if before is None or before.get("tombstone"):
                return None

        mutation_doc = {
            "goal_id": goal_id,
            "action": action,
            "before": before,
            "created_at": datetime.utcnow(),
        }
        result = await self.mutations.insert_one(mutation_doc)

        return result.inserted_id

    @wrap_store_errors
    async def discard(self, mutation_id: Optional[ObjectId]) -> None:
        """Drop an entry whose mutation did not happen."""
        if mutation_id:
            await self.mutations.delete_one({"_id": mutation_id})

    @wrap_store_errors
    async def undo_last(self) -> Optional[str]:
        """
        Revert the most recent goal mutation.

        Returns:
            ID of the affected goal, or None if there is nothing to undo
        """
        # Popped before reverting so concurrent undos never share an entry
        mutation = await self.mutations.find_one_and_delete({}, sort=[("_id", -1)])
        if mutation is None:
            return None

        goal_id = mutation["goal_id"]
        if mutation["before"] is None:
            await self.store.soft_delete(goal_id)
        else:
            before = dict(mutation["before"])
            before["updated_at"] = datetime.utcnow()
            await self.store.restore(before)
            if not before.get("tombstone"):
                await self.progress.compute_progress(goal_id)

        logger.info("Undid %s of goal %s", mutation["action"], goal_id)

        return goal_id
