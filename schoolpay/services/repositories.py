"""
Repositories
Document store access behind small protocols so services can be tested with fakes
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol

from beanie import PydanticObjectId
from bson import ObjectId

from schoolpay.models.audit import AuditLog
from schoolpay.models.payroll import Payroll, PayrollRecord, PayrollStatus
from schoolpay.models.staff import PaymentType, Staff, StaffMember, StaffStatus
from schoolpay.payroll.payslip import normalize_payslip


class StaffRepository(Protocol):
    async def list(
        self,
        *,
        status: Optional[StaffStatus] = None,
        payment_type: Optional[PaymentType] = None,
    ) -> List[StaffMember]:
        raise NotImplementedError

    async def get(self, staff_id: str) -> Optional[StaffMember]:
        raise NotImplementedError

    async def create(self, data: Dict[str, Any]) -> StaffMember:
        raise NotImplementedError

    async def update(self, staff_id: str, data: Dict[str, Any]) -> Optional[StaffMember]:
        raise NotImplementedError


class PayrollRepository(Protocol):
    async def exists_for_period(self, period: str) -> bool:
        raise NotImplementedError

    async def insert(
        self,
        *,
        period: str,
        total_amount: float,
        payslips: List[Dict[str, Any]],
        status: PayrollStatus,
    ) -> Payroll:
        """Persist a new run; the store assigns id and run_date."""
        raise NotImplementedError

    async def get(self, payroll_id: str) -> Optional[Payroll]:
        raise NotImplementedError

    async def list_all(self) -> List[Payroll]:
        """Newest run first."""
        raise NotImplementedError

    async def update(self, payroll_id: str, fields: Dict[str, Any]) -> bool:
        raise NotImplementedError

    async def delete(self, payroll_id: str) -> bool:
        raise NotImplementedError


class AuditRepository(Protocol):
    async def insert(self, entry: Dict[str, Any]) -> None:
        raise NotImplementedError


def _object_id(value: str) -> Optional[PydanticObjectId]:
    if not ObjectId.is_valid(value):
        return None
    return PydanticObjectId(value)


def record_to_payroll(record: PayrollRecord) -> Payroll:
    return Payroll(
        id=str(record.id),
        period=record.period,
        total_amount=record.total_amount,
        payslips=[normalize_payslip(p) for p in record.payslips or []],
        status=record.status,
        run_date=record.run_date,
    )


class BeanieStaffRepository:
    async def list(self, *, status=None, payment_type=None) -> List[StaffMember]:
        query = Staff.find()
        if status is not None:
            query = query.find(Staff.status == status)
        if payment_type is not None:
            query = query.find(Staff.payment_type == payment_type)
        return [s.to_member() for s in await query.sort("name").to_list()]

    async def get(self, staff_id: str) -> Optional[StaffMember]:
        oid = _object_id(staff_id)
        if oid is None:
            return None
        staff = await Staff.get(oid)
        return staff.to_member() if staff else None

    async def create(self, data: Dict[str, Any]) -> StaffMember:
        staff = Staff(**data)
        await staff.insert()
        return staff.to_member()

    async def update(self, staff_id: str, data: Dict[str, Any]) -> Optional[StaffMember]:
        oid = _object_id(staff_id)
        if oid is None:
            return None
        staff = await Staff.get(oid)
        if not staff:
            return None
        await staff.set({**data, "updated_at": datetime.utcnow()})
        return staff.to_member()


class BeaniePayrollRepository:
    async def exists_for_period(self, period: str) -> bool:
        return await PayrollRecord.find_one(PayrollRecord.period == period) is not None

    async def insert(self, *, period, total_amount, payslips, status) -> Payroll:
        record = PayrollRecord(
            period=period,
            total_amount=total_amount,
            payslips=payslips,
            status=status,
            run_date=datetime.utcnow(),
        )
        await record.insert()
        return record_to_payroll(record)

    async def get(self, payroll_id: str) -> Optional[Payroll]:
        oid = _object_id(payroll_id)
        if oid is None:
            return None
        record = await PayrollRecord.get(oid)
        return record_to_payroll(record) if record else None

    async def list_all(self) -> List[Payroll]:
        records = await PayrollRecord.find().sort("-run_date").to_list()
        return [record_to_payroll(r) for r in records]

    async def update(self, payroll_id: str, fields: Dict[str, Any]) -> bool:
        oid = _object_id(payroll_id)
        if oid is None:
            return False
        record = await PayrollRecord.get(oid)
        if not record:
            return False
        await record.set(fields)
        return True

    async def delete(self, payroll_id: str) -> bool:
        oid = _object_id(payroll_id)
        if oid is None:
            return False
        record = await PayrollRecord.get(oid)
        if not record:
            return False
        await record.delete()
        return True


class BeanieAuditRepository:
    async def insert(self, entry: Dict[str, Any]) -> None:
        await AuditLog(**entry).insert()
