"""Roster filtering, default payslip construction and run aggregation."""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from schoolpay.models.payroll import ItemType, Payslip, PayslipItem
from schoolpay.models.staff import PaymentType, StaffMember, StaffStatus
from schoolpay.payroll import constants as c
from schoolpay.payroll.deductions import (
    calculate_amo,
    calculate_cnss,
    calculate_employer_amo,
    calculate_employer_cnss,
    calculate_ir,
    calculate_taxable_income,
    make_ir_item,
    percentage_deduction,
    sum_amount,
)
from schoolpay.payroll.proration import calculate_prorated_base

logger = logging.getLogger(__name__)


def is_eligible(staff: StaffMember) -> bool:
    """Active, paid a fixed salary, with a positive rate."""
    return (
        staff.status == StaffStatus.ACTIVE
        and staff.payment_type == PaymentType.SALARY
        and bool(staff.payment_rate)
        and staff.payment_rate > 0
    )


def eligible_staff(roster: Iterable[StaffMember]) -> List[StaffMember]:
    return [s for s in roster if is_eligible(s)]


def base_salary_item(amount: float, label: str = "Base salary") -> PayslipItem:
    return PayslipItem(
        id=c.BASE_SALARY_ITEM_ID,
        label=label,
        amount=amount,
        type=ItemType.EARNING,
        category=c.CATEGORY_BASE,
        taxable=True,
    )


def bonus_item(amount: float) -> PayslipItem:
    return PayslipItem(
        id=c.BONUS_ITEM_ID,
        label="Bonus",
        amount=amount,
        type=ItemType.EARNING,
        category=c.CATEGORY_BONUS,
        taxable=True,
    )


def flat_deduction_items(gross: float, rate: float) -> List[PayslipItem]:
    return [
        PayslipItem(
            id=c.WITHHOLDING_ITEM_ID,
            label=f"Withholding ({rate * 100:g}%)",
            amount=percentage_deduction(rate, gross),
            type=ItemType.DEDUCTION,
            category=c.CATEGORY_WITHHOLDING,
            rate=rate,
            taxable=False,
        )
    ]


def statutory_deduction_items(earnings: List[PayslipItem]) -> List[PayslipItem]:
    gross = sum_amount(earnings)
    deductions = [
        PayslipItem(
            id="cnss",
            label="CNSS",
            amount=calculate_cnss(gross),
            type=ItemType.DEDUCTION,
            category=c.CATEGORY_CNSS,
            rate=c.CNSS_EMPLOYEE_RATE,
            taxable=False,
        ),
        PayslipItem(
            id="amo",
            label="AMO",
            amount=calculate_amo(gross),
            type=ItemType.DEDUCTION,
            category=c.CATEGORY_AMO,
            rate=c.AMO_EMPLOYEE_RATE,
            taxable=False,
        ),
    ]
    ir = calculate_ir(calculate_taxable_income(earnings, deductions))
    if ir > 0:
        deductions.append(make_ir_item(ir))
    return deductions


def build_payslip(
    staff: StaffMember,
    period: str,
    *,
    scheme: str = c.SCHEME_FLAT,
    flat_rate: float = c.DEFAULT_FLAT_DEDUCTION_RATE,
    prorate: bool = True,
    bonus: float = 0.0,
) -> Optional[Payslip]:
    """Build the initial payslip for one eligible staff member.

    Returns None when the staff member has no working days in the period.
    """
    monthly_salary = float(staff.payment_rate or 0.0)
    label = "Base salary"
    if prorate:
        proration = calculate_prorated_base(monthly_salary, staff.hire_date, period)
        if proration.days_worked == 0:
            logger.info(f"Skipping staff {staff.id}: no working days in {period}")
            return None
        if proration.is_partial:
            label = f"{label} (Prorated {proration.days_worked}/{proration.total_days})"
        monthly_salary = proration.prorated_base

    earnings = [base_salary_item(monthly_salary, label)]
    if bonus > 0:
        earnings.append(bonus_item(bonus))
    gross = sum_amount(earnings)

    if scheme == c.SCHEME_STATUTORY:
        deductions = statutory_deduction_items(earnings)
    elif scheme == c.SCHEME_FLAT:
        deductions = flat_deduction_items(gross, flat_rate)
    else:
        raise ValueError(f"Unknown deduction scheme: {scheme}")

    total_deductions = sum_amount(deductions)

    payslip = Payslip(
        staff_id=str(staff.id),
        staff_name=staff.name,
        staff_position=staff.position,
        cnss_number=staff.cnss_number,
        cin=staff.cin,
        period=period,
        base_salary=monthly_salary,
        earnings=earnings,
        deductions=deductions,
        gross_salary=gross,
        total_deductions=total_deductions,
        net_pay=gross - total_deductions,
    )
    if scheme == c.SCHEME_STATUTORY:
        payslip.employer_cnss = calculate_employer_cnss(gross)
        payslip.employer_amo = calculate_employer_amo(gross)
    return payslip


def aggregate_total(payslips: Sequence[Payslip]) -> float:
    return sum(p.net_pay for p in payslips)


def build_payslips(
    roster: Iterable[StaffMember],
    period: str,
    **options,
) -> Tuple[List[Payslip], float]:
    """Filter the roster and build one payslip per eligible member."""
    payslips = []
    for staff in eligible_staff(roster):
        payslip = build_payslip(staff, period, **options)
        if payslip is not None:
            payslips.append(payslip)
    return payslips, aggregate_total(payslips)
