"""
Audit Log Database Model.

Records authentication events and purchase/administrative actions.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from coursestore.app.db.session import Base


class AuditLog(Base):
    """
    Audit log entry.

    Events logged:
    - USER_CREATED / LOGIN_SUCCESS / LOGIN_FAILED / LOGOUT
    - CART_ITEM_ADDED / CART_ITEM_REMOVED / CART_CLEARED
    - INVOICE_CREATED / INVOICE_UPDATED / INVOICE_DELETED
    """
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Who performed the action (None for anonymous attempts)
    actor_id = Column(Integer, index=True, nullable=True)
    actor_username = Column(String(100), nullable=True)

    action = Column(String(100), nullable=False, index=True)

    # What the action was about (e.g. "invoice", 12)
    entity_type = Column(String(50), nullable=True)
    entity_id = Column(Integer, nullable=True, index=True)

    meta_data = Column(JSON, nullable=True)
    ip_address = Column(String(50), nullable=True)

    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', actor={self.actor_username}, entity={self.entity_type}:{self.entity_id})>"
