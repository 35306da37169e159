from beanie import Document
from datetime import datetime
from typing import Any, Dict, Optional
from enum import Enum
from pydantic import Field


class AuditAction(str, Enum):
    PAYROLL_GENERATE = "payroll.generate"
    PAYROLL_EDIT = "payroll.edit"
    PAYROLL_CONFIRM = "payroll.confirm"
    PAYROLL_DELETE = "payroll.delete"


class AuditStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class AuditLog(Document):
    action: AuditAction
    status: AuditStatus
    user_id: Optional[str] = None
    resource_id: Optional[str] = None
    resource_type: Optional[str] = None
    error_message: Optional[str] = None
    details: Dict[str, Any] = {}
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "audit_logs"
        indexes = [
            "action",
            "created_at",
        ]
