"""
Response Cache - exact-match chat answers per tenant.

The key is (tenant_id, message) with the message stored byte-for-byte:
"What's my revenue?" and "What's my revenue? " are different entries.
Only answers from networked providers are cached; rule-based answers
are cheap to recompute and would go stale as data changes.

Writes are best-effort: a failed write is logged and rolled back, and the
caller's response is unaffected.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from aistudio.models.usage import CachedResponse

logger = logging.getLogger("aistudio.services.response_cache")


class ResponseCache:
    def __init__(self, db: Session):
        self.db = db

    def get(self, tenant_id: UUID, message: str) -> Optional[CachedResponse]:
        try:
            return (
                self.db.query(CachedResponse)
                .filter(CachedResponse.tenant_id == tenant_id, CachedResponse.message == message)
                .first()
            )
        except SQLAlchemyError as e:
            logger.warning(f"Cache read failed for tenant {tenant_id}: {e}")
            self.db.rollback()
            return None

    def put(self, tenant_id: UUID, message: str, response: str, service: str) -> bool:
        """Insert or replace the cached answer. Returns False if the write failed."""
        try:
            entry = (
                self.db.query(CachedResponse)
                .filter(CachedResponse.tenant_id == tenant_id, CachedResponse.message == message)
                .first()
            )
            if entry is None:
                self.db.add(CachedResponse(
                    tenant_id=tenant_id,
                    message=message,
                    response=response,
                    service=service,
                ))
            else:
                entry.response = response
                entry.service = service
            self.db.commit()
            return True
        except SQLAlchemyError as e:
            logger.warning(f"Cache write failed for tenant {tenant_id}: {e}")
            self.db.rollback()
            return False
