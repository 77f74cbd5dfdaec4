"""Goal service - business logic for goal management and progress reconciliation."""
import logging
from typing import Optional

from app.exceptions import GoalNotFoundError
from app.models.goal import Goal, GoalCreate, GoalSummary, GoalUpdate, RecalculationResult
from app.services.goal_store import GoalStore
from app.services.progress_service import ProgressService

logger = logging.getLogger(__name__)


class GoalService:
    """Service for handling goal operations."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.store = GoalStore(db)
        self.progress = ProgressService(db, store=self.store)

    async def _reload(self, goal_id: str) -> Goal:
        goal = await self.store.get_goal(goal_id)
        if goal is None:
            raise GoalNotFoundError(goal_id)
        return goal

    async def list_goals(self) -> list[Goal]:
        """
        List live goals, newest first.

        Returns:
            List of goals
        """
        return await self.store.list_goals()

    async def get_goal(self, goal_id: str) -> Goal:
        """
        Get a single goal by ID.

        Raises:
            GoalNotFoundError: If goal not found or deleted
        """
        return await self._reload(goal_id)

    async def create_goal(self, goal_create: GoalCreate, goal_id: Optional[str] = None) -> Goal:
        """
        Create a new goal and compute its initial progress.

        Transactions tagged before the goal existed count immediately.

        Args:
            goal_create: Goal creation data
            goal_id: Pre-assigned goal ID, generated when omitted

        Returns:
            Created goal including its first computed current_amount

        Raises:
            GoalValidationError: If a required field is missing or invalid
        """
        goal = await self.store.insert_goal(goal_create, goal_id=goal_id)
        logger.info("Created goal %s with tag #%s", goal.id, goal.tag_pattern)

        await self.progress.compute_progress(goal.id)

        return await self._reload(goal.id)

    async def update_goal(self, goal_id: str, goal_update: GoalUpdate) -> Goal:
        """
        Update a goal.

        Progress is recomputed only when the tag pattern is part of the
        update; otherwise current_amount keeps its cached value.

        Args:
            goal_id: Goal ID
            goal_update: Update data

        Returns:
            Updated goal

        Raises:
            GoalNotFoundError: If goal not found or deleted
        """
        goal = await self.store.apply_partial_update(goal_id, goal_update)
        logger.info("Updated goal %s fields %s", goal_id, sorted(goal_update.changes()))

        if "tag_pattern" in goal_update.model_fields_set:
            await self.progress.compute_progress(goal_id)
            goal = await self._reload(goal_id)

        return goal

    async def delete_goal(self, goal_id: str) -> bool:
        """
        Soft delete a goal.

        Returns:
            True if a live goal was deleted, False if it was absent or already deleted
        """
        deleted = await self.store.soft_delete(goal_id)
        if deleted:
            logger.info("Deleted goal %s", goal_id)
        return deleted

    async def recalculate_goal(self, goal_id: str) -> Goal:
        """
        Recompute progress for a single goal.

        Raises:
            GoalNotFoundError: If goal not found or deleted
        """
        await self._reload(goal_id)
        await self.progress.compute_progress(goal_id)
        return await self._reload(goal_id)

    async def recalculate_all(self) -> RecalculationResult:
        """
        Recompute progress for every live goal, one at a time.

        A failure on one goal is logged and does not stop the batch.

        Returns:
            IDs of recalculated goals and of goals that failed
        """
        result = RecalculationResult()

        for goal in await self.store.list_goals():
            try:
                await self.progress.compute_progress(goal.id)
            except Exception:
                logger.exception("Recalculation failed for goal %s", goal.id)
                result.failed.append(goal.id)
            else:
                result.recalculated.append(goal.id)

        logger.info(
            "Recalculated %d goals (%d failed)",
            len(result.recalculated),
            len(result.failed),
        )
        return result

    async def get_summary(self) -> GoalSummary:
        """
        Totals across live goals.

        Returns:
            Goal count, completed count and amount totals
        """
        goals = await self.store.list_goals()

        return GoalSummary(
            goal_count=len(goals),
            completed_count=sum(1 for goal in goals if goal.is_completed),
            total_target_amount=sum(goal.target_amount for goal in goals),
            total_current_amount=sum(goal.current_amount for goal in goals),
        )
