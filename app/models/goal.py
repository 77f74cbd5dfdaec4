"""Goal model definitions."""
from datetime import date, datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, Field, computed_field, model_validator

from app.utils.tags import is_valid_tag_pattern


def _check_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Name is required")
    return value


def _check_tag_pattern(value: str) -> str:
    if not value.strip():
        raise ValueError("Tag pattern is required")
    if not is_valid_tag_pattern(value):
        raise ValueError("Tag pattern can only contain letters, numbers, and underscores")
    return value


def _check_target_date(value: Optional[date]) -> Optional[date]:
    if value is not None and value <= date.today():
        raise ValueError("Target date must be in the future")
    return value


GoalName = Annotated[str, AfterValidator(_check_name)]
TagPattern = Annotated[str, AfterValidator(_check_tag_pattern)]
FutureDate = Annotated[Optional[date], AfterValidator(_check_target_date)]
TargetAmount = Annotated[int, Field(gt=0, description="Target in minor currency units")]


class GoalCreate(BaseModel):
    """Goal creation model."""

    name: GoalName
    description: Optional[str] = None
    target_amount: TargetAmount
    target_date: FutureDate = None
    tag_pattern: TagPattern
    color: Optional[str] = None


class GoalUpdate(BaseModel):
    """Goal update model - all fields optional, only the fields sent are applied."""

    name: Optional[GoalName] = None
    description: Optional[str] = None
    target_amount: Optional[TargetAmount] = None
    target_date: FutureDate = None
    tag_pattern: Optional[TagPattern] = None
    color: Optional[str] = None

    @model_validator(mode="after")
    def _required_fields_not_cleared(self):
        for field in ("name", "target_amount", "tag_pattern", "color"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self

    def changes(self) -> dict:
        """Fields explicitly sent by the client."""
        return self.model_dump(exclude_unset=True)


class Goal(BaseModel):
    """Full goal model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    name: str
    description: Optional[str] = None
    target_amount: int
    current_amount: int = 0
    target_date: Optional[date] = None
    tag_pattern: str
    color: str
    tombstone: bool = False
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}

    @computed_field
    @property
    def progress_percentage(self) -> float:
        if self.target_amount <= 0:
            return 0.0
        return self.current_amount / self.target_amount * 100

    @computed_field
    @property
    def remaining_amount(self) -> int:
        return max(0, self.target_amount - self.current_amount)

    @computed_field
    @property
    def is_completed(self) -> bool:
        return self.progress_percentage >= 100

    @computed_field
    @property
    def days_until_target(self) -> Optional[int]:
        if self.target_date is None:
            return None
        return (self.target_date - date.today()).days


class GoalSummary(BaseModel):
    """Totals across all live goals."""

    goal_count: int = 0
    completed_count: int = 0
    total_target_amount: int = 0
    total_current_amount: int = 0

    @computed_field
    @property
    def overall_progress_percentage(self) -> float:
        if self.total_target_amount <= 0:
            return 0.0
        return self.total_current_amount / self.total_target_amount * 100


class RecalculationResult(BaseModel):
    """Outcome of a bulk progress recalculation."""

    recalculated: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)
