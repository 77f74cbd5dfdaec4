"""Goal router - API endpoints for goal management and progress tracking."""
import asyncio
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from app.database import get_database
from app.exceptions import GoalNotFoundError, GoalValidationError, StoreError
from app.models.goal import Goal, GoalCreate, GoalSummary, GoalUpdate, RecalculationResult
from app.models.transaction import GoalTransaction
from app.services.goal_service import GoalService
from app.services.transaction_service import GoalTransactionService
from app.services.undo_service import UndoService
from app.utils.tags import is_valid_tag_pattern


router = APIRouter(prefix="/goals", tags=["goals"])

# Only one bulk recalculation may run at a time
_recalculate_lock = asyncio.Lock()


class DeleteResponse(BaseModel):
    """Delete response model."""

    deleted: bool


class UndoResponse(BaseModel):
    """Undo response model."""

    goal_id: Optional[str] = None


def _store_unavailable(e: StoreError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


@router.get("", response_model=list[Goal])
async def list_goals(db=Depends(get_database)):
    """
    List goals.

    - Newest first
    - Excludes deleted goals
    """
    service = GoalService(db)
    try:
        return await service.list_goals()
    except StoreError as e:
        raise _store_unavailable(e)


@router.post("", response_model=Goal, status_code=status.HTTP_201_CREATED)
async def create_goal(goal: GoalCreate, db=Depends(get_database)):
    """
    Create a new goal.

    - Progress is computed from already tagged transactions
    - Color defaults to the configured goal color
    """
    service = GoalService(db)
    undo = UndoService(db)
    goal_id = str(uuid.uuid4())
    try:
        # Kept on StoreError: the goal may already be stored
        mutation_id = await undo.record(goal_id, "create")
        try:
            return await service.create_goal(goal, goal_id=goal_id)
        except GoalValidationError as e:
            await undo.discard(mutation_id)
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except StoreError as e:
        raise _store_unavailable(e)


@router.get("/summary", response_model=GoalSummary)
async def get_summary(db=Depends(get_database)):
    """Totals across all goals."""
    service = GoalService(db)
    try:
        return await service.get_summary()
    except StoreError as e:
        raise _store_unavailable(e)


@router.post("/recalculate", response_model=RecalculationResult)
async def recalculate_goals(db=Depends(get_database)):
    """
    Recompute progress for every goal.

    - Goals that fail are reported and skipped
    - Returns 409 while another recalculation is running
    """
    if _recalculate_lock.locked():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Recalculation already in progress",
        )

    async with _recalculate_lock:
        service = GoalService(db)
        try:
            return await service.recalculate_all()
        except StoreError as e:
            raise _store_unavailable(e)


@router.post("/undo", response_model=UndoResponse)
async def undo_last_change(db=Depends(get_database)):
    """
    Revert the most recent create, update or delete.

    - goal_id is null when there is nothing to undo
    """
    try:
        goal_id = await UndoService(db).undo_last()
    except StoreError as e:
        raise _store_unavailable(e)
    return UndoResponse(goal_id=goal_id)


@router.get("/transactions", response_model=list[GoalTransaction])
async def list_transactions_by_tag(
    tag_pattern: str = Query(..., description="Tag pattern without the leading #"),
    goal_id: Optional[str] = Query(None, description="Goal the tag belongs to"),
    db=Depends(get_database),
):
    """
    List transactions tagged with #tag_pattern.

    - Newest first, inflows and outflows alike
    - Tag is stripped from the displayed description
    """
    if not is_valid_tag_pattern(tag_pattern):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Tag pattern can only contain letters, numbers, and underscores",
        )

    service = GoalTransactionService(db)
    return await service.list_goal_transactions(tag_pattern, goal_id=goal_id)


@router.get("/{goal_id}", response_model=Goal)
async def get_goal(goal_id: str, db=Depends(get_database)):
    """
    Get a single goal.

    - Returns 404 if goal not found or deleted
    """
    service = GoalService(db)
    try:
        return await service.get_goal(goal_id)
    except GoalNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StoreError as e:
        raise _store_unavailable(e)


@router.patch("/{goal_id}", response_model=Goal)
async def update_goal(goal_id: str, goal_update: GoalUpdate, db=Depends(get_database)):
    """
    Update a goal.

    - Only the fields sent are changed
    - Changing tag_pattern recomputes progress
    - Returns 404 if goal not found or deleted
    """
    service = GoalService(db)
    undo = UndoService(db)
    try:
        mutation_id = await undo.record(goal_id, "update")
        try:
            return await service.update_goal(goal_id, goal_update)
        except GoalNotFoundError as e:
            await undo.discard(mutation_id)
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StoreError as e:
        raise _store_unavailable(e)


@router.delete("/{goal_id}", response_model=DeleteResponse)
async def delete_goal(goal_id: str, db=Depends(get_database)):
    """
    Soft delete a goal.

    - Marks goal as deleted, doesn't remove it from the database
    - Deleting an unknown or already deleted goal returns deleted=false
    """
    service = GoalService(db)
    undo = UndoService(db)
    try:
        mutation_id = await undo.record(goal_id, "delete")
        deleted = await service.delete_goal(goal_id)
        if not deleted:
            await undo.discard(mutation_id)
    except StoreError as e:
        raise _store_unavailable(e)
    return DeleteResponse(deleted=deleted)


@router.post("/{goal_id}/recalculate", response_model=Goal)
async def recalculate_goal(goal_id: str, db=Depends(get_database)):
    """
    Recompute progress for one goal.

    - Returns 404 if goal not found or deleted
    """
    service = GoalService(db)
    try:
        return await service.recalculate_goal(goal_id)
    except GoalNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StoreError as e:
        raise _store_unavailable(e)


@router.get("/{goal_id}/transactions", response_model=list[GoalTransaction])
async def list_goal_transactions(goal_id: str, db=Depends(get_database)):
    """
    List transactions counted toward a goal.

    - Returns 404 if goal not found or deleted
    """
    try:
        goal = await GoalService(db).get_goal(goal_id)
    except GoalNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StoreError as e:
        raise _store_unavailable(e)

    service = GoalTransactionService(db)
    return await service.list_goal_transactions(goal.tag_pattern, goal_id=goal.id)
