"""Counter reconciliation.

``replyCount`` and ``totalVotes`` are maintained incrementally and can drift
if a rewrite is lost (for example two processes writing the same file). This
recomputes both from the underlying data.
"""
from collections import Counter
from typing import Dict

from anonymchat.core.logging_config import get_logger
from anonymchat.db.store import JsonFileStore, StoreKind
from anonymchat.db.uploads import UploadStorage

logger = get_logger(__name__)


def reconcile_messages(store: JsonFileStore, upload_storage: UploadStorage) -> Dict[str, int]:
    """
    Drop replies whose parent is missing or is itself a reply, then recompute
    every message's ``replyCount``.

    Uploaded files of dropped replies are deleted once the store is written.
    """
    with store.transaction(StoreKind.MESSAGES) as records:
        top_level_ids = {record.get("id") for record in records if not record.get("parentId")}

        kept = []
        removed = []
        for record in records:
            if not record.get("parentId") or record["parentId"] in top_level_ids:
                kept.append(record)
            else:
                removed.append(record)
        records[:] = kept

        reply_counts = Counter(record["parentId"] for record in records if record.get("parentId"))
        counters_fixed = 0
        for record in records:
            expected = reply_counts.get(record.get("id"), 0)
            if record.get("replyCount") != expected:
                record["replyCount"] = expected
                counters_fixed += 1

    for record in removed:
        if record.get("fileUrl"):
            upload_storage.delete(record["fileUrl"])

    return {"orphaned_replies_removed": len(removed), "reply_counts_fixed": counters_fixed}


def reconcile_polls(store: JsonFileStore) -> Dict[str, int]:
    """Recompute every poll's ``totalVotes`` from its option tallies."""
    with store.transaction(StoreKind.POLLS) as records:
        totals_fixed = 0
        for record in records:
            expected = sum(int(option.get("votes") or 0) for option in record.get("options") or [])
            if record.get("totalVotes") != expected:
                record["totalVotes"] = expected
                totals_fixed += 1

    return {"poll_totals_fixed": totals_fixed}


def reconcile_counters(store: JsonFileStore, upload_storage: UploadStorage) -> Dict[str, int]:
    """Run every reconciliation and return a combined report."""
    report = {**reconcile_messages(store, upload_storage), **reconcile_polls(store)}
    logger.info("counters_reconciled", **report)
    return report
