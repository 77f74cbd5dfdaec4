"""Transaction model definitions.

Transactions and accounts are owned by the ledger; the goal services only
read them.
"""
import datetime

from pydantic import BaseModel, Field


class GoalTransaction(BaseModel):
    """A ledger transaction matched by a goal tag, ready for display."""

    id: str = Field(alias="_id", serialization_alias="id")
    date: datetime.date
    amount: int
    notes: str = ""
    description: str = ""
    account: str

    model_config = {"populate_by_name": True}
