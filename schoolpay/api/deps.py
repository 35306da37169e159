"""
API Dependencies
Service wiring for route handlers
"""
from functools import lru_cache
from typing import Optional

from fastapi import Header

from schoolpay.config import settings
from schoolpay.services.audit import AuditService
from schoolpay.services.payroll import PayrollService
from schoolpay.services.rate_limit import RateLimiter
from schoolpay.services.repositories import (
    BeanieAuditRepository,
    BeaniePayrollRepository,
    BeanieStaffRepository,
)
from schoolpay.services.staff import StaffService


@lru_cache()
def get_rate_limiter() -> Optional[RateLimiter]:
    if not settings.RATE_LIMIT_ENABLED:
        return None
    return RateLimiter(
        max_attempts=settings.PAYROLL_GENERATION_MAX_ATTEMPTS,
        window_seconds=settings.PAYROLL_GENERATION_WINDOW_SECONDS,
    )


def get_payroll_service() -> PayrollService:
    return PayrollService(
        BeaniePayrollRepository(),
        BeanieStaffRepository(),
        audit=AuditService(BeanieAuditRepository()),
        rate_limiter=get_rate_limiter(),
        scheme=settings.PAYROLL_DEDUCTION_SCHEME,
        flat_rate=settings.PAYROLL_FLAT_DEDUCTION_RATE,
        prorate=settings.PAYROLL_PRORATE_NEW_HIRES,
    )


def get_staff_service() -> StaffService:
    return StaffService(BeanieStaffRepository())


async def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> Optional[str]:
    """Operator id used for audit entries and rate limiting"""
    return x_user_id
