"""Error types raised by the goal services."""


class GoalValidationError(ValueError):
    """A goal payload is missing a required field or carries an invalid value."""


class GoalNotFoundError(ValueError):
    """The goal does not exist or has been deleted."""

    def __init__(self, goal_id: str):
        super().__init__("Goal not found")
        self.goal_id = goal_id


class StoreError(RuntimeError):
    """The underlying MongoDB operation failed."""
