"""Maintenance schemas."""
from pydantic import BaseModel


class ReconcileReport(BaseModel):
    orphaned_replies_removed: int
    reply_counts_fixed: int
    poll_totals_fixed: int


class ImportantInfo(BaseModel):
    content: str
