"""
Audit Service
Records who did what to payroll runs
"""
import logging
from typing import Any, Dict, Optional

from schoolpay.models.audit import AuditAction, AuditStatus
from schoolpay.services.repositories import AuditRepository

logger = logging.getLogger(__name__)


class AuditService:
    """Writes audit entries; a failing audit write never fails the audited operation"""

    def __init__(self, repository: Optional[AuditRepository] = None):
        self.repository = repository

    async def log(
        self,
        action: AuditAction,
        status: AuditStatus,
        *,
        user_id: Optional[str] = None,
        resource_id: Optional[str] = None,
        resource_type: Optional[str] = "payroll",
        error_message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        entry = {
            "action": action,
            "status": status,
            "user_id": user_id,
            "resource_id": resource_id,
            "resource_type": resource_type,
            "error_message": error_message,
            "details": details or {},
        }
        logger.info(f"audit {action.value} {status.value} resource={resource_id} user={user_id}")

        if self.repository is None:
            return
        try:
            await self.repository.insert(entry)
        except Exception as e:
            logger.error(f"Failed to write audit entry for {action.value}: {e}", exc_info=True)
