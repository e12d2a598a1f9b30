"""Celery tasks for compliance document housekeeping."""

from __future__ import annotations

import asyncio
import logging

from celery_app import celery
from src.config import settings
from src.database.engine import async_session
from src.modules.compliance.document_service import DocumentService

logger = logging.getLogger(__name__)


async def _check_expiring_documents_async(within_days: int) -> dict:
    """Collect verified documents that expire within ``within_days``."""
    stats = {"checked_days": within_days, "expiring": 0, "documents": []}

    async with async_session() as session:
        documents = await DocumentService(session).find_expiring_documents(within_days)

    for document in documents:
        logger.warning(
            "Document %s (%s) of %s %s expires on %s",
            document.id,
            document.doc_type,
            document.owner_type.value,
            document.owner_id,
            document.expiry_date.date().isoformat(),
        )
        stats["documents"].append(str(document.id))
    stats["expiring"] = len(documents)
    return stats


@celery.task(name="src.modules.compliance.tasks.check_expiring_documents")
def check_expiring_documents(within_days: int | None = None):
    """Flag verified documents that are about to expire."""
    days = within_days if within_days is not None else settings.document_expiry_warning_days
    stats = asyncio.run(_check_expiring_documents_async(days))
    logger.info("check_expiring_documents complete: %d expiring", stats["expiring"])
    return stats
