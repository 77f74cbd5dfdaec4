"""Goal transaction service - matched ledger entries for display."""
import logging
from datetime import datetime
from typing import Optional

from pymongo.errors import PyMongoError

from app.config import settings
from app.models.transaction import GoalTransaction
from app.utils.tags import matches_tag, strip_tag, tag_filter, tag_token

logger = logging.getLogger(__name__)


def display_description(
    tag_pattern: str,
    notes: Optional[str],
    imported_description: Optional[str],
) -> str:
    """
    Pick the text shown for a matched transaction, with the goal tag removed.

    Notes win when they carry the tag; otherwise the imported description is
    used if it does.
    """
    notes = notes or ""
    imported_description = imported_description or ""
    token = tag_token(tag_pattern)

    if token in notes:
        return strip_tag(notes, tag_pattern)
    if token in imported_description:
        return strip_tag(imported_description, tag_pattern)
    return notes or imported_description


class GoalTransactionService:
    """Service for listing the transactions that feed a goal."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.transactions = db["transactions"]
        self.accounts = db["accounts"]

    async def _account_names(self, account_ids: set) -> dict:
        if not account_ids:
            return {}
        cursor = self.accounts.find({"_id": {"$in": list(account_ids)}}, {"name": 1})
        account_docs = await cursor.to_list(length=None)
        return {doc["_id"]: doc.get("name") for doc in account_docs}

    def _doc_to_transaction(self, doc: dict, tag_pattern: str, account_names: dict) -> GoalTransaction:
        tx_date = doc["date"]
        if isinstance(tx_date, datetime):
            tx_date = tx_date.date()

        return GoalTransaction(
            _id=str(doc["_id"]),
            date=tx_date,
            amount=doc["amount"],
            notes=doc.get("notes") or "",
            description=display_description(
                tag_pattern,
                doc.get("notes"),
                doc.get("imported_description"),
            ),
            account=account_names.get(doc.get("account")) or settings.unknown_account_label,
        )

    async def list_goal_transactions(
        self,
        tag_pattern: str,
        goal_id: Optional[str] = None,
    ) -> list[GoalTransaction]:
        """
        List live transactions tagged for a goal, newest first.

        Both inflows and outflows are returned. A failed query yields an
        empty list instead of an error, and malformed rows are skipped.

        Args:
            tag_pattern: Goal tag pattern
            goal_id: Optional goal ID, used for log context

        Returns:
            List of matched transactions
        """
        try:
            cursor = self.transactions.find(tag_filter(tag_pattern)).sort("date", -1)
            tx_docs = await cursor.to_list(length=None)
            tx_docs = [
                doc
                for doc in tx_docs
                if matches_tag(tag_pattern, doc.get("notes"), doc.get("imported_description"))
            ]
            account_names = await self._account_names(
                {doc["account"] for doc in tx_docs if doc.get("account") is not None}
            )
        except PyMongoError:
            logger.warning(
                "Could not load transactions for goal %s (#%s)",
                goal_id,
                tag_pattern,
                exc_info=True,
            )
            return []

        transactions = []
        for doc in tx_docs:
            try:
                transactions.append(self._doc_to_transaction(doc, tag_pattern, account_names))
            except (KeyError, ValueError):
                logger.warning("Skipping malformed transaction %s", doc.get("_id"), exc_info=True)

        return transactions
