"""
Audit logging service for authentication events and purchase actions.
"""

import logging
from typing import Optional, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from sqlalchemy.exc import SQLAlchemyError
from coursestore.app.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


class AuditAction:
    """Standardized audit action constants."""
    USER_CREATED = "USER_CREATED"
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGIN_FAILED = "LOGIN_FAILED"
    LOGOUT = "LOGOUT"

    CART_ITEM_ADDED = "CART_ITEM_ADDED"
    CART_ITEM_REMOVED = "CART_ITEM_REMOVED"
    CART_CLEARED = "CART_CLEARED"

    INVOICE_CREATED = "INVOICE_CREATED"
    INVOICE_UPDATED = "INVOICE_UPDATED"
    INVOICE_DELETED = "INVOICE_DELETED"

    CATALOG_CREATED = "CATALOG_CREATED"
    CATALOG_UPDATED = "CATALOG_UPDATED"
    CATALOG_DELETED = "CATALOG_DELETED"


async def log_event(
    db: AsyncSession,
    action: str,
    actor_id: Optional[int] = None,
    actor_username: Optional[str] = None,
    entity_type: Optional[str] = None,
    entity_id: Optional[int] = None,
    metadata: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None
) -> Optional[AuditLog]:
    """
    Write an audit entry and commit it.

    Call after the business change itself has been committed so the entry
    never outlives a rolled-back change. A failed audit write is logged and
    rolled back; it never fails the request that triggered it.
    """
    try:
        audit_log = AuditLog(
            actor_id=actor_id,
            actor_username=actor_username,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            meta_data=metadata,
            ip_address=ip_address
        )
        db.add(audit_log)
        await db.commit()
        await db.refresh(audit_log)
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Could not write audit entry %s for actor %s", action, actor_id)
        return None

    return audit_log


async def get_audit_trail(
    db: AsyncSession,
    actor_id: Optional[int] = None,
    action: Optional[str] = None,
    limit: int = 100
) -> list[AuditLog]:
    """
    Retrieve audit entries, most recent first, with optional filtering.
    """
    query = select(AuditLog).order_by(desc(AuditLog.timestamp), desc(AuditLog.id))

    if actor_id is not None:
        query = query.where(AuditLog.actor_id == actor_id)

    if action:
        query = query.where(AuditLog.action == action)

    query = query.limit(limit)

    result = await db.execute(query)
    return list(result.scalars().all())
