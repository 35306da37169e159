from __future__ import annotations

from datetime import date, datetime

import pytest

from schoolpay.models.payroll import Payroll, PayrollStatus
from schoolpay.models.staff import PaymentType, StaffMember, StaffStatus
from schoolpay.payroll.payslip import normalize_payslip
from schoolpay.services.audit import AuditService
from schoolpay.services.payroll import PayrollService


class FakeStaffRepo:
    def __init__(self, members=None):
        self._members = {m.id: m for m in (members or [])}
        self._next_id = 100

    async def list(self, *, status=None, payment_type=None):
        return [
            m
            for m in self._members.values()
            if (status is None or m.status == status) and (payment_type is None or m.payment_type == payment_type)
        ]

    async def get(self, staff_id):
        return self._members.get(staff_id)

    async def create(self, data):
        sid = str(self._next_id)
        self._next_id += 1
        member = StaffMember(id=sid, **data)
        self._members[sid] = member
        return member

    async def update(self, staff_id, data):
        member = self._members.get(staff_id)
        if member is None:
            return None
        member = member.model_copy(update=data)
        self._members[staff_id] = member
        return member


class FakePayrollRepo:
    def __init__(self):
        self._next_id = 1
        self.docs: dict[str, dict] = {}
        self.fail_on: set[str] = set()

    def _check(self, op):
        if op in self.fail_on:
            raise RuntimeError(f"store unavailable during {op}")

    def _to_payroll(self, pid, doc):
        return Payroll(
            id=pid,
            period=doc["period"],
            total_amount=doc["total_amount"],
            payslips=[normalize_payslip(p) for p in doc["payslips"]],
            status=doc["status"],
            run_date=doc["run_date"],
        )

    async def exists_for_period(self, period):
        self._check("exists")
        return any(d["period"] == period for d in self.docs.values())

    async def insert(self, *, period, total_amount, payslips, status):
        self._check("insert")
        pid = f"payroll-{self._next_id}"
        self._next_id += 1
        self.docs[pid] = {
            "period": period,
            "total_amount": total_amount,
            "payslips": list(payslips),
            "status": PayrollStatus(status).value,
            "run_date": datetime(2025, 1, 31, 9, 0, 0),
        }
        return self._to_payroll(pid, self.docs[pid])

    async def get(self, payroll_id):
        self._check("get")
        doc = self.docs.get(payroll_id)
        return self._to_payroll(payroll_id, doc) if doc else None

    async def list_all(self):
        self._check("list")
        return [self._to_payroll(pid, d) for pid, d in reversed(list(self.docs.items()))]

    async def update(self, payroll_id, fields):
        self._check("update")
        if payroll_id not in self.docs:
            return False
        self.docs[payroll_id].update(fields)
        return True

    async def delete(self, payroll_id):
        self._check("delete")
        return self.docs.pop(payroll_id, None) is not None


class FakeAuditRepo:
    def __init__(self):
        self.entries = []

    async def insert(self, entry):
        self.entries.append(entry)


def make_staff(
    sid="s1",
    name="Amina Benali",
    rate=10000.0,
    status=StaffStatus.ACTIVE,
    payment_type=PaymentType.SALARY,
    hire_date=None,
):
    return StaffMember(
        id=sid,
        name=name,
        status=status,
        payment_type=payment_type,
        payment_rate=rate,
        hire_date=datetime.combine(hire_date, datetime.min.time()) if type(hire_date) is date else hire_date,
    )


@pytest.fixture
def staff_repo():
    return FakeStaffRepo([make_staff()])


@pytest.fixture
def payroll_repo():
    return FakePayrollRepo()


@pytest.fixture
def audit_repo():
    return FakeAuditRepo()


@pytest.fixture
def service(payroll_repo, staff_repo, audit_repo):
    return PayrollService(payroll_repo, staff_repo, audit=AuditService(audit_repo))
