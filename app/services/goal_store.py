"""Goal store - persistence for goal documents."""
import functools
import uuid
from datetime import date, datetime
from typing import Optional

from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from app.config import settings
from app.exceptions import GoalNotFoundError, GoalValidationError, StoreError
from app.models.goal import Goal, GoalCreate, GoalUpdate
from app.utils.tags import is_valid_tag_pattern


def wrap_store_errors(method):
    """Re-raise driver failures as StoreError."""

    @functools.wraps(method)
    async def wrapper(*args, **kwargs):
        try:
            return await method(*args, **kwargs)
        except PyMongoError as e:
            raise StoreError(f"{method.__name__} failed: {e}") from e

    return wrapper


def _to_datetime(value: Optional[date]) -> Optional[datetime]:
    # BSON has no date type
    if value is None:
        return None
    return datetime.combine(value, datetime.min.time())


def doc_to_goal(doc: dict) -> Goal:
    """
    Convert database document to Goal model.

    Handles datetime to date conversion for target_date.
    """
    target_date = doc.get("target_date")
    if isinstance(target_date, datetime):
        target_date = target_date.date()

    return Goal(
        _id=str(doc["_id"]),
        name=doc["name"],
        description=doc.get("description"),
        target_amount=doc["target_amount"],
        current_amount=doc.get("current_amount", 0),
        target_date=target_date,
        tag_pattern=doc["tag_pattern"],
        color=doc.get("color") or settings.default_goal_color,
        tombstone=doc.get("tombstone", False),
        created_at=doc["created_at"],
        updated_at=doc["updated_at"],
    )


class GoalStore:
    """CRUD access to the goals collection with soft deletion."""

    def __init__(self, db):
        """Initialize store with database connection."""
        self.db = db
        self.goals = db["goals"]

    @staticmethod
    def _validate(goal_create: GoalCreate) -> None:
        name = getattr(goal_create, "name", None)
        target_amount = getattr(goal_create, "target_amount", None)
        if not name or not name.strip():
            raise GoalValidationError("Name is required")
        if not isinstance(target_amount, int) or target_amount <= 0:
            raise GoalValidationError("Target amount must be greater than zero")
        if not is_valid_tag_pattern(getattr(goal_create, "tag_pattern", None)):
            raise GoalValidationError(
                "Tag pattern can only contain letters, numbers, and underscores"
            )

    @wrap_store_errors
    async def list_goals(self) -> list[Goal]:
        """
        List live goals, newest first.

        Returns:
            Goals with tombstone unset, ordered by created_at descending
        """
        cursor = self.goals.find({"tombstone": False}).sort("created_at", -1)
        goal_docs = await cursor.to_list(length=None)

        return [doc_to_goal(doc) for doc in goal_docs]

    @wrap_store_errors
    async def get_goal(self, goal_id: str) -> Optional[Goal]:
        """
        Get a single live goal.

        Args:
            goal_id: Goal ID

        Returns:
            Goal object, or None if absent or deleted
        """
        goal_doc = await self.goals.find_one({"_id": goal_id, "tombstone": False})

        if not goal_doc:
            return None

        return doc_to_goal(goal_doc)

    @wrap_store_errors
    async def get_raw(self, goal_id: str) -> Optional[dict]:
        """Fetch the stored document regardless of tombstone state."""
        return await self.goals.find_one({"_id": goal_id})

    @wrap_store_errors
    async def insert_goal(self, goal_create: GoalCreate, goal_id: Optional[str] = None) -> Goal:
        """
        Persist a new goal with zero progress.

        Args:
            goal_create: Goal creation data
            goal_id: Pre-assigned goal ID, generated when omitted

        Returns:
            Created goal object

        Raises:
            GoalValidationError: If a required field is missing or invalid
        """
        self._validate(goal_create)

        now = datetime.utcnow()
        goal_doc = {
            "_id": goal_id or str(uuid.uuid4()),
            "name": goal_create.name.strip(),
            "description": goal_create.description,
            "target_amount": goal_create.target_amount,
            "current_amount": 0,
            "target_date": _to_datetime(goal_create.target_date),
            "tag_pattern": goal_create.tag_pattern,
            "color": goal_create.color or settings.default_goal_color,
            "tombstone": False,
            "created_at": now,
            "updated_at": now,
        }

        await self.goals.insert_one(goal_doc)

        return doc_to_goal(goal_doc)

    @wrap_store_errors
    async def apply_partial_update(self, goal_id: str, goal_update: GoalUpdate) -> Goal:
        """
        Apply the fields sent in an update, leaving the rest untouched.

        Args:
            goal_id: Goal ID
            goal_update: Update data

        Returns:
            Updated goal

        Raises:
            GoalNotFoundError: If goal is absent or deleted
        """
        update_doc = goal_update.changes()
        if "target_date" in update_doc:
            update_doc["target_date"] = _to_datetime(update_doc["target_date"])
        update_doc["updated_at"] = datetime.utcnow()

        updated_doc = await self.goals.find_one_and_update(
            {"_id": goal_id, "tombstone": False},
            {"$set": update_doc},
            return_document=ReturnDocument.AFTER,
        )

        if not updated_doc:
            raise GoalNotFoundError(goal_id)

        return doc_to_goal(updated_doc)

    @wrap_store_errors
    async def set_current_amount(self, goal_id: str, amount: int) -> bool:
        """
        Write the cached progress figure.

        Returns:
            True if a live goal was updated
        """
        result = await self.goals.update_one(
            {"_id": goal_id, "tombstone": False},
            {"$set": {"current_amount": amount, "updated_at": datetime.utcnow()}},
        )
        return result.matched_count > 0

    @wrap_store_errors
    async def soft_delete(self, goal_id: str) -> bool:
        """
        Soft delete a goal.

        Args:
            goal_id: Goal ID

        Returns:
            True if a live goal was marked deleted, False otherwise
        """
        result = await self.goals.update_one(
            {"_id": goal_id, "tombstone": False},
            {"$set": {"tombstone": True, "updated_at": datetime.utcnow()}},
        )
        return result.modified_count > 0

    @wrap_store_errors
    async def restore(self, goal_doc: dict) -> None:
        """Replace a goal with a previously captured document."""
        await self.goals.replace_one({"_id": goal_doc["_id"]}, goal_doc, upsert=True)
