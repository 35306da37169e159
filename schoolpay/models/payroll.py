"""
Payroll Model
Database schema for payroll runs and their payslips
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field
from beanie import Document
from pymongo import IndexModel


class ItemType(str, Enum):
    """Side of the payslip a line item sits on"""
    EARNING = "earning"
    DEDUCTION = "deduction"

    @property
    def list_key(self) -> str:
        return "earnings" if self is ItemType.EARNING else "deductions"


class PayrollStatus(str, Enum):
    """Payment state of a payroll run"""
    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"


class PayslipItem(BaseModel):
    """A single named amount on a payslip"""
    id: str
    label: str = ""
    amount: float = 0.0
    type: ItemType
    category: Optional[str] = None
    rate: Optional[float] = None
    taxable: Optional[bool] = None
    hours: Optional[float] = None
    hourly_rate: Optional[float] = None


class Payslip(BaseModel):
    """One staff member's itemized pay for one period"""
    staff_id: str
    staff_name: str
    staff_position: Optional[str] = None
    cnss_number: Optional[str] = None
    cin: Optional[str] = None
    period: str = ""
    payment_date: Optional[str] = None

    base_salary: float = 0.0
    earnings: List[PayslipItem] = Field(default_factory=list)
    deductions: List[PayslipItem] = Field(default_factory=list)

    # Derived, kept consistent by recalc_payslip
    gross_salary: float = 0.0
    total_deductions: float = 0.0
    net_pay: float = 0.0

    employer_cnss: Optional[float] = None
    employer_amo: Optional[float] = None


class Payroll(BaseModel):
    """A payroll run as returned to callers"""
    id: Optional[str] = None
    period: str
    total_amount: float = 0.0
    payslips: List[Payslip] = Field(default_factory=list)
    status: PayrollStatus = PayrollStatus.PENDING
    run_date: Optional[datetime] = None


class PayrollRecord(Document):
    """Payroll document model

    Payslips are stored as plain dicts so that legacy layouts survive a read
    and can be normalized by the payroll package.
    """
    period: str
    total_amount: float = 0.0
    payslips: List[Dict[str, Any]] = []
    status: PayrollStatus = PayrollStatus.PENDING
    run_date: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "payrolls"
        indexes = [
            IndexModel("period", unique=True),
            "run_date",
        ]


# --- Request / response schemas ---

class GeneratePayrollRequest(BaseModel):
    period: str = Field(..., min_length=1, examples=["July 2024"])


class GenerationFailure(str, Enum):
    INVALID_PERIOD = "invalid_period"
    RATE_LIMITED = "rate_limited"
    ALREADY_GENERATED = "already_generated"
    NO_ELIGIBLE_STAFF = "no_eligible_staff"
    INVALID_DATA = "invalid_data"
    UNEXPECTED = "unexpected"


class GeneratePayrollResult(BaseModel):
    """Outcome of a generation attempt; callers branch on success"""
    success: bool
    payroll: Optional[Payroll] = None
    reason: Optional[str] = None
    code: Optional[GenerationFailure] = None

    @classmethod
    def ok(cls, payroll: Payroll) -> "GeneratePayrollResult":
        return cls(success=True, payroll=payroll)

    @classmethod
    def fail(cls, reason: str, code: GenerationFailure) -> "GeneratePayrollResult":
        return cls(success=False, reason=reason, code=code)


class PayrollUpdate(BaseModel):
    """Partial update of a payroll run"""
    period: Optional[str] = Field(default=None, min_length=1)
    payslips: Optional[List[Payslip]] = None
    status: Optional[PayrollStatus] = None


class AddItemRequest(BaseModel):
    type: ItemType
    label: Optional[str] = None


class EditItemRequest(BaseModel):
    type: ItemType
    field: Literal["label", "amount"]
    value: Union[float, str]


class PayrollSummary(BaseModel):
    """Run-level totals shown on the summary screen"""
    payroll_id: Optional[str] = None
    period: str
    status: PayrollStatus
    staff_count: int
    total_gross: float
    total_deductions: float
    total_net: float
    total_employer_cnss: float
    total_employer_amo: float


# --- Generation-time validation ---

class PayslipDraft(BaseModel):
    staff_id: str = Field(..., min_length=1)
    staff_name: str = Field(..., min_length=1)
    base_salary: float = Field(..., gt=0)
    gross_salary: float = Field(..., ge=0)
    total_deductions: float = Field(..., ge=0)
    net_pay: float = Field(..., ge=0)
    employer_cnss: Optional[float] = Field(default=None, ge=0)
    employer_amo: Optional[float] = Field(default=None, ge=0)


class PayrollDraft(BaseModel):
    period: str = Field(..., min_length=1)
    total_amount: float = Field(..., gt=0)
    payslips: List[PayslipDraft] = Field(..., min_length=1)
