"""
Payroll Service
Generation, editing and confirmation of payroll runs
"""
import logging
from typing import Callable, List, Optional, Union

import pydantic
from pymongo.errors import DuplicateKeyError

from schoolpay.core.exceptions import NotFoundError, PersistenceError, ValidationError
from schoolpay.models.audit import AuditAction, AuditStatus
from schoolpay.models.payroll import (
    GeneratePayrollResult,
    GenerationFailure,
    ItemType,
    Payroll,
    PayrollDraft,
    PayrollStatus,
    PayrollSummary,
    PayrollUpdate,
    Payslip,
)
from schoolpay.models.staff import PaymentType, StaffStatus
from schoolpay.payroll import constants as c
from schoolpay.payroll.generator import aggregate_total, build_payslips
from schoolpay.payroll.payslip import (
    add_item,
    edit_item,
    find_item,
    recalc_payslip,
    remove_item,
    sanitize_payslip,
)
from schoolpay.payroll.summary import summarize_payroll
from schoolpay.services.audit import AuditService
from schoolpay.services.rate_limit import RateLimiter
from schoolpay.services.repositories import PayrollRepository, StaffRepository

logger = logging.getLogger(__name__)

NO_ELIGIBLE_STAFF = "No eligible staff: no active staff members with fixed salaries were found to generate payroll."
UNEXPECTED_GENERATION_ERROR = "An unexpected error occurred while generating payroll."


def already_generated(period: str) -> str:
    return f"Payroll for {period} was already generated."


class PayrollService:
    def __init__(
        self,
        payrolls: PayrollRepository,
        staff: StaffRepository,
        *,
        audit: Optional[AuditService] = None,
        rate_limiter: Optional[RateLimiter] = None,
        scheme: str = c.SCHEME_FLAT,
        flat_rate: float = c.DEFAULT_FLAT_DEDUCTION_RATE,
        prorate: bool = True,
    ):
        if scheme not in (c.SCHEME_FLAT, c.SCHEME_STATUTORY):
            raise ValueError(f"Unknown deduction scheme: {scheme}")
        self.payrolls = payrolls
        self.staff = staff
        self.audit = audit or AuditService()
        self.rate_limiter = rate_limiter
        self.scheme = scheme
        self.flat_rate = flat_rate
        self.prorate = prorate

    # --- Generation ---

    async def _fail_generation(
        self,
        period: str,
        reason: str,
        code: GenerationFailure,
        user_id: Optional[str],
    ) -> GeneratePayrollResult:
        await self.audit.log(
            AuditAction.PAYROLL_GENERATE,
            AuditStatus.FAILURE,
            user_id=user_id,
            error_message=reason,
            details={"period": period},
        )
        return GeneratePayrollResult.fail(reason, code)

    async def generate_payroll(self, period: str, user_id: Optional[str] = None) -> GeneratePayrollResult:
        """Generate the payroll run for ``period`` over the active salaried roster.

        Business-rule failures come back as ``success=False`` with a reason,
        never as exceptions.
        """
        period = (period or "").strip()
        if not period:
            return GeneratePayrollResult.fail("Period is required.", GenerationFailure.INVALID_PERIOD)

        if self.rate_limiter is not None:
            limit = self.rate_limiter.check(f"payroll:generate:{user_id or 'anonymous'}")
            if not limit.allowed:
                until = limit.blocked_until.strftime("%H:%M:%S") if limit.blocked_until else "some time"
                return await self._fail_generation(
                    period, f"Rate limit exceeded. Try again after {until}.", GenerationFailure.RATE_LIMITED, user_id
                )

        try:
            if await self.payrolls.exists_for_period(period):
                return await self._fail_generation(
                    period, already_generated(period), GenerationFailure.ALREADY_GENERATED, user_id
                )

            roster = await self.staff.list(status=StaffStatus.ACTIVE, payment_type=PaymentType.SALARY)
            payslips, total_amount = build_payslips(
                roster,
                period,
                scheme=self.scheme,
                flat_rate=self.flat_rate,
                prorate=self.prorate,
            )
            if not payslips:
                return await self._fail_generation(
                    period, NO_ELIGIBLE_STAFF, GenerationFailure.NO_ELIGIBLE_STAFF, user_id
                )

            documents = [sanitize_payslip(p) for p in payslips]
            try:
                PayrollDraft.model_validate(
                    {"period": period, "total_amount": total_amount, "payslips": documents}
                )
            except pydantic.ValidationError as e:
                errors = "; ".join(
                    f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
                )
                return await self._fail_generation(
                    period, f"Invalid payroll data: {errors}", GenerationFailure.INVALID_DATA, user_id
                )

            try:
                payroll = await self.payrolls.insert(
                    period=period,
                    total_amount=total_amount,
                    payslips=documents,
                    status=PayrollStatus.PENDING,
                )
            except DuplicateKeyError:
                logger.warning(f"Payroll for {period} was inserted concurrently")
                return await self._fail_generation(
                    period, already_generated(period), GenerationFailure.ALREADY_GENERATED, user_id
                )
        except Exception as e:
            logger.error(f"Error generating payroll for {period}: {e}", exc_info=True)
            return await self._fail_generation(
                period, UNEXPECTED_GENERATION_ERROR, GenerationFailure.UNEXPECTED, user_id
            )

        logger.info(
            f"Payroll {payroll.id} generated for {period}: "
            f"{len(payroll.payslips)} payslips, total {payroll.total_amount:.2f}"
        )
        await self.audit.log(
            AuditAction.PAYROLL_GENERATE,
            AuditStatus.SUCCESS,
            user_id=user_id,
            resource_id=payroll.id,
            details={"period": period, "total_amount": total_amount, "staff_count": len(payslips)},
        )
        return GeneratePayrollResult.ok(payroll)

    # --- Reads ---

    async def list_payrolls(self) -> List[Payroll]:
        try:
            return await self.payrolls.list_all()
        except Exception as e:
            logger.error(f"Error getting payrolls: {e}", exc_info=True)
            raise PersistenceError("Failed to get payrolls.") from e

    async def get_payroll(self, payroll_id: str) -> Optional[Payroll]:
        try:
            return await self.payrolls.get(payroll_id)
        except Exception as e:
            logger.error(f"Error getting payroll {payroll_id}: {e}", exc_info=True)
            raise PersistenceError("Failed to get payroll.") from e

    async def _require(self, payroll_id: str) -> Payroll:
        payroll = await self.get_payroll(payroll_id)
        if payroll is None:
            raise NotFoundError(f"Payroll {payroll_id} not found")
        return payroll

    async def get_payslip(self, payroll_id: str, staff_id: str) -> Payslip:
        payroll = await self._require(payroll_id)
        for payslip in payroll.payslips:
            if payslip.staff_id == staff_id:
                return payslip
        raise NotFoundError(f"No payslip for staff {staff_id} in payroll {payroll_id}")

    async def get_summary(self, payroll_id: str) -> PayrollSummary:
        return summarize_payroll(await self._require(payroll_id))

    async def recalculate_payroll(self, payroll_id: str) -> Payroll:
        """Recalculate every payslip in view without saving."""
        payroll = await self._require(payroll_id)
        payslips = [recalc_payslip(p) for p in payroll.payslips]
        return payroll.model_copy(update={"payslips": payslips, "total_amount": aggregate_total(payslips)})

    # --- Writes ---

    async def _period_taken(self, period: str, payroll_id: str, user_id: Optional[str]) -> bool:
        try:
            return await self.payrolls.exists_for_period(period)
        except Exception as e:
            logger.error(f"Error checking payroll period {period}: {e}", exc_info=True)
            await self.audit.log(
                AuditAction.PAYROLL_EDIT,
                AuditStatus.FAILURE,
                user_id=user_id,
                resource_id=payroll_id,
                error_message=str(e),
            )
            raise PersistenceError("Failed to update payroll.") from e

    async def update_payroll(self, payroll_id: str, update: PayrollUpdate, user_id: Optional[str] = None) -> None:
        """Persist edits; payslips are recalculated and the run total re-derived first."""
        existing = await self._require(payroll_id)

        period = None
        if update.period is not None:
            period = update.period.strip()
            if not period:
                raise ValidationError("Period is required.")
            if period != existing.period and await self._period_taken(period, payroll_id, user_id):
                raise ValidationError(already_generated(period))

        payslips = update.payslips if update.payslips is not None else existing.payslips
        recalculated = [recalc_payslip(p) for p in payslips]
        fields = {
            "payslips": [sanitize_payslip(p) for p in recalculated],
            "total_amount": aggregate_total(recalculated),
        }
        if period is not None:
            fields["period"] = period
        if update.status is not None:
            fields["status"] = update.status.value

        action = AuditAction.PAYROLL_CONFIRM if update.status == PayrollStatus.PAID else AuditAction.PAYROLL_EDIT
        try:
            updated = await self.payrolls.update(payroll_id, fields)
        except Exception as e:
            logger.error(f"Error updating payroll {payroll_id}: {e}", exc_info=True)
            await self.audit.log(
                action,
                AuditStatus.FAILURE,
                user_id=user_id,
                resource_id=payroll_id,
                error_message=str(e),
            )
            raise PersistenceError("Failed to update payroll.") from e
        if not updated:
            raise NotFoundError(f"Payroll {payroll_id} not found")

        await self.audit.log(
            action,
            AuditStatus.SUCCESS,
            user_id=user_id,
            resource_id=payroll_id,
            details={"fields": sorted(fields), "total_amount": fields["total_amount"]},
        )

    async def confirm_payment(self, payroll_id: str, user_id: Optional[str] = None) -> Payroll:
        await self.update_payroll(payroll_id, PayrollUpdate(status=PayrollStatus.PAID), user_id)
        return await self._require(payroll_id)

    async def delete_payroll(self, payroll_id: str, user_id: Optional[str] = None) -> None:
        try:
            deleted = await self.payrolls.delete(payroll_id)
        except Exception as e:
            logger.error(f"Error deleting payroll {payroll_id}: {e}", exc_info=True)
            raise PersistenceError("Failed to delete payroll.") from e
        if not deleted:
            raise NotFoundError(f"Payroll {payroll_id} not found")
        logger.info(f"Payroll {payroll_id} deleted")
        await self.audit.log(AuditAction.PAYROLL_DELETE, AuditStatus.SUCCESS, user_id=user_id, resource_id=payroll_id)

    # --- Line items ---

    async def _edit_payslip(
        self,
        payroll_id: str,
        staff_id: str,
        change: Callable[[Payslip], Payslip],
        user_id: Optional[str],
    ) -> Payroll:
        payroll = await self._require(payroll_id)
        if not any(p.staff_id == staff_id for p in payroll.payslips):
            raise NotFoundError(f"No payslip for staff {staff_id} in payroll {payroll_id}")
        payslips = [change(p) if p.staff_id == staff_id else p for p in payroll.payslips]
        await self.update_payroll(payroll_id, PayrollUpdate(payslips=payslips), user_id)
        return await self._require(payroll_id)

    async def add_payslip_item(
        self,
        payroll_id: str,
        staff_id: str,
        item_type: ItemType,
        label: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Payroll:
        return await self._edit_payslip(payroll_id, staff_id, lambda p: add_item(p, item_type, label), user_id)

    async def remove_payslip_item(
        self,
        payroll_id: str,
        staff_id: str,
        item_type: ItemType,
        item_id: str,
        user_id: Optional[str] = None,
    ) -> Payroll:
        payslip = await self.get_payslip(payroll_id, staff_id)
        if find_item(payslip, item_type, item_id) is None:
            raise NotFoundError(f"Item {item_id} not found")
        return await self._edit_payslip(payroll_id, staff_id, lambda p: remove_item(p, item_type, item_id), user_id)

    async def edit_payslip_item(
        self,
        payroll_id: str,
        staff_id: str,
        item_type: ItemType,
        item_id: str,
        field: str,
        value: Union[float, str],
        user_id: Optional[str] = None,
    ) -> Payroll:
        """Edit one item; a non-numeric amount raises InvalidAmountError and nothing is saved."""
        payslip = await self.get_payslip(payroll_id, staff_id)
        if find_item(payslip, item_type, item_id) is None:
            raise NotFoundError(f"Item {item_id} not found")
        edited = edit_item(payslip, item_type, item_id, field, value, strict=True)
        return await self._edit_payslip(payroll_id, staff_id, lambda p: edited, user_id)
