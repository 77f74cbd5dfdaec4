"""Tests for Pydantic models."""
import pytest
from datetime import date, datetime, timedelta
from pydantic import ValidationError


def _goal(**overrides):
    from app.models.goal import Goal

    data = {
        "_id": "goal-1",
        "name": "New car",
        "target_amount": 100000,
        "current_amount": 25000,
        "tag_pattern": "car",
        "color": "#3b82f6",
        "created_at": datetime.utcnow(),
        "updated_at": datetime.utcnow(),
    }
    data.update(overrides)
    return Goal(**data)


class TestGoalCreateModel:
    """Tests for GoalCreate model."""

    def test_goal_create_minimal(self):
        """Test creating a goal with minimal required fields."""
        from app.models.goal import GoalCreate

        goal = GoalCreate(name="New car", target_amount=100000, tag_pattern="car")

        assert goal.name == "New car"
        assert goal.target_amount == 100000
        assert goal.tag_pattern == "car"
        assert goal.description is None
        assert goal.target_date is None
        assert goal.color is None

    def test_goal_create_strips_name(self):
        """Test that the name is trimmed."""
        from app.models.goal import GoalCreate

        goal = GoalCreate(name="  New car ", target_amount=1, tag_pattern="car")

        assert goal.name == "New car"

    @pytest.mark.parametrize("tag_pattern", [" car ", "car ", "   "])
    def test_goal_create_padded_tag_pattern(self, tag_pattern):
        """Test that whitespace around a tag pattern is rejected, not trimmed."""
        from app.models.goal import GoalCreate

        with pytest.raises(ValidationError):
            GoalCreate(name="New car", target_amount=1, tag_pattern=tag_pattern)

    def test_goal_update_padded_tag_pattern(self):
        """Test that updates apply the same tag pattern rule."""
        from app.models.goal import GoalUpdate

        with pytest.raises(ValidationError):
            GoalUpdate(tag_pattern=" car ")

    @pytest.mark.parametrize("amount", [0, -100])
    def test_goal_create_non_positive_target(self, amount):
        """Test that the target amount must be positive."""
        from app.models.goal import GoalCreate

        with pytest.raises(ValidationError):
            GoalCreate(name="New car", target_amount=amount, tag_pattern="car")

    def test_goal_create_empty_name(self):
        """Test that an empty name is rejected."""
        from app.models.goal import GoalCreate

        with pytest.raises(ValidationError, match="Name is required"):
            GoalCreate(name="   ", target_amount=100, tag_pattern="car")

    @pytest.mark.parametrize("pattern", ["", "#car", "new car", "car-fund"])
    def test_goal_create_invalid_tag_pattern(self, pattern):
        """Test that malformed tag patterns are rejected."""
        from app.models.goal import GoalCreate

        with pytest.raises(ValidationError):
            GoalCreate(name="New car", target_amount=100, tag_pattern=pattern)

    def test_goal_create_past_target_date(self):
        """Test that the target date must be in the future."""
        from app.models.goal import GoalCreate

        with pytest.raises(ValidationError, match="Target date must be in the future"):
            GoalCreate(
                name="New car",
                target_amount=100,
                tag_pattern="car",
                target_date=date.today(),
            )

    def test_goal_create_future_target_date(self):
        """Test that a future target date is accepted."""
        from app.models.goal import GoalCreate

        tomorrow = date.today() + timedelta(days=1)
        goal = GoalCreate(
            name="New car",
            target_amount=100,
            tag_pattern="car",
            target_date=tomorrow,
        )

        assert goal.target_date == tomorrow


class TestGoalUpdateModel:
    """Tests for GoalUpdate model."""

    def test_goal_update_all_optional(self):
        """Test that an empty update is valid and carries no changes."""
        from app.models.goal import GoalUpdate

        update = GoalUpdate()

        assert update.changes() == {}

    def test_goal_update_changes_only_sent_fields(self):
        """Test that changes() contains only explicitly set fields."""
        from app.models.goal import GoalUpdate

        update = GoalUpdate(color="#10b981", description=None)

        assert update.changes() == {"color": "#10b981", "description": None}

    def test_goal_update_cannot_clear_required_field(self):
        """Test that required fields cannot be set to null."""
        from app.models.goal import GoalUpdate

        with pytest.raises(ValidationError, match="tag_pattern cannot be null"):
            GoalUpdate(tag_pattern=None)

    def test_goal_update_validates_tag_pattern(self):
        """Test that tag pattern validation applies to updates."""
        from app.models.goal import GoalUpdate

        with pytest.raises(ValidationError):
            GoalUpdate(tag_pattern="#vacation")

    def test_goal_update_validates_target_amount(self):
        """Test that target amount validation applies to updates."""
        from app.models.goal import GoalUpdate

        with pytest.raises(ValidationError):
            GoalUpdate(target_amount=0)


class TestGoalModel:
    """Tests for the Goal response model."""

    def test_goal_serializes_id(self):
        """Test that _id is exposed as id."""
        goal = _goal()

        data = goal.model_dump(by_alias=True)

        assert data["id"] == "goal-1"

    def test_goal_progress_fields(self):
        """Test derived progress fields."""
        goal = _goal(current_amount=25000, target_amount=100000)

        assert goal.progress_percentage == 25.0
        assert goal.remaining_amount == 75000
        assert goal.is_completed is False

    def test_goal_completed(self):
        """Test that exceeding the target marks the goal completed."""
        goal = _goal(current_amount=120000, target_amount=100000)

        assert goal.is_completed is True
        assert goal.remaining_amount == 0

    def test_goal_zero_target(self):
        """Test progress of a goal with a zero target."""
        goal = _goal(target_amount=0)

        assert goal.progress_percentage == 0.0

    def test_goal_days_until_target(self):
        """Test days until target date."""
        assert _goal().days_until_target is None
        assert _goal(target_date=date.today() + timedelta(days=10)).days_until_target == 10

    def test_goal_accepts_past_target_date(self):
        """Test that stored goals with a passed target date still load."""
        goal = _goal(target_date=date.today() - timedelta(days=3))

        assert goal.days_until_target == -3


class TestGoalSummaryModel:
    """Tests for GoalSummary model."""

    def test_summary_overall_progress(self):
        """Test overall progress percentage."""
        from app.models.goal import GoalSummary

        summary = GoalSummary(
            goal_count=2,
            total_target_amount=200000,
            total_current_amount=50000,
        )

        assert summary.overall_progress_percentage == 25.0

    def test_summary_empty(self):
        """Test an empty summary."""
        from app.models.goal import GoalSummary

        assert GoalSummary().overall_progress_percentage == 0.0
