"""
Audit trail writes and reads. Entries are insert-only.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..models.audit import AuditLogDocument
from ..utils.dates import utc_now

logger = logging.getLogger(__name__)


async def record_audit(
    db: AsyncIOMotorDatabase,
    action: str,
    entity_type: str,
    performed_by: str,
    entity_id: Optional[str] = None,
    details: Optional[str] = None,
) -> str:
    """Append an audit entry and return its id."""
    entry = AuditLogDocument(
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        performed_by=performed_by,
        details=details,
        timestamp=utc_now(),
    )
    result = await db.audit_logs.insert_one(entry.model_dump(exclude={"id"}))
    logger.debug(f"Audit {action} on {entity_type} {entity_id} by {performed_by}")
    return str(result.inserted_id)


async def get_audit_logs(
    db: AsyncIOMotorDatabase,
    limit: int,
    offset: int,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
) -> Tuple[List[Dict[str, Any]], int]:
    """Newest-first page of audit entries and the total matching count."""
    filter_query: Dict[str, Any] = {}
    if entity_type:
        filter_query["entity_type"] = entity_type
    if entity_id:
        filter_query["entity_id"] = entity_id

    total = await db.audit_logs.count_documents(filter_query)
    cursor = db.audit_logs.find(filter_query).sort("timestamp", -1).skip(offset).limit(limit)
    return await cursor.to_list(length=limit), total
