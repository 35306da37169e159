"""Payslip recalculation, line-item editing and document shaping.

Every mutation returns a new ``Payslip`` that has already been passed through
``recalc_payslip``, so gross, total deductions and net pay never drift from
the item lists.
"""
from __future__ import annotations

import math
import time
from typing import Any, Dict, List, Mapping, Optional, Union

from schoolpay.core.exceptions import InvalidAmountError, ValidationError
from schoolpay.models.payroll import ItemType, Payslip, PayslipItem
from schoolpay.payroll import constants as c
from schoolpay.payroll.deductions import (
    calculate_employer_amo,
    calculate_employer_cnss,
    recalculate_deductions,
    round2,
    sum_amount,
)

DEFAULT_CUSTOM_LABEL = "Custom item"

EDITABLE_FIELDS = ("label", "amount")


def recalc_payslip(payslip: Payslip) -> Payslip:
    """Re-derive deductions and totals from the item lists."""
    earnings = list(payslip.earnings or [])
    deductions = recalculate_deductions(earnings, list(payslip.deductions or []))
    gross = sum_amount(earnings)
    total_deductions = sum_amount(deductions)

    base_salary = next((e.amount for e in earnings if e.id == c.BASE_SALARY_ITEM_ID), None)
    if base_salary is None:
        base_salary = payslip.base_salary if payslip.base_salary is not None else 0.0

    update: Dict[str, Any] = {
        "earnings": earnings,
        "deductions": deductions,
        "gross_salary": gross,
        "total_deductions": total_deductions,
        "net_pay": gross - total_deductions,
        "base_salary": base_salary,
    }
    if payslip.employer_cnss is not None:
        update["employer_cnss"] = calculate_employer_cnss(gross)
    if payslip.employer_amo is not None:
        update["employer_amo"] = calculate_employer_amo(gross)
    return payslip.model_copy(update=update)


def _items(payslip: Payslip, item_type: ItemType) -> List[PayslipItem]:
    return list(getattr(payslip, item_type.list_key) or [])


def find_item(payslip: Payslip, item_type: ItemType, item_id: str) -> Optional[PayslipItem]:
    return next((item for item in _items(payslip, item_type) if item.id == item_id), None)


def new_item_id(payslip: Payslip, item_type: ItemType, *, now_ms: Optional[int] = None) -> str:
    """Timestamp-derived id, bumped until unique within the payslip."""
    taken = {item.id for item in payslip.earnings} | {item.id for item in payslip.deductions}
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    candidate = f"{item_type.value}-{stamp}"
    while candidate in taken:
        stamp += 1
        candidate = f"{item_type.value}-{stamp}"
    return candidate


def add_item(
    payslip: Payslip,
    item_type: ItemType,
    label: Optional[str] = None,
    *,
    now_ms: Optional[int] = None,
) -> Payslip:
    item = PayslipItem(
        id=new_item_id(payslip, item_type, now_ms=now_ms),
        label=label or DEFAULT_CUSTOM_LABEL,
        amount=0.0,
        type=item_type,
        category=c.CATEGORY_CUSTOM,
    )
    items = _items(payslip, item_type) + [item]
    return recalc_payslip(payslip.model_copy(update={item_type.list_key: items}))


def remove_item(payslip: Payslip, item_type: ItemType, item_id: str) -> Payslip:
    items = [item for item in _items(payslip, item_type) if item.id != item_id]
    return recalc_payslip(payslip.model_copy(update={item_type.list_key: items}))


def parse_amount(value: Union[str, int, float, None]) -> Optional[float]:
    """Parse a form value into a finite amount, or None when it is not a number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return None
    return amount if math.isfinite(amount) else None


def edit_item(
    payslip: Payslip,
    item_type: ItemType,
    item_id: str,
    field: str,
    value: Union[str, int, float],
    *,
    strict: bool = False,
) -> Payslip:
    """Change the label or amount of one item.

    A non-numeric amount leaves the item as it was; with ``strict`` it raises
    ``InvalidAmountError`` instead.
    """
    if field not in EDITABLE_FIELDS:
        raise ValidationError(f"Field {field!r} cannot be edited")

    update: Dict[str, Any]
    if field == "amount":
        amount = parse_amount(value)
        if amount is None:
            if strict:
                raise InvalidAmountError(value)
            update = {}
        else:
            update = {"amount": amount}
    else:
        update = {"label": "" if value is None else str(value)}

    items = [
        item.model_copy(update=update) if item.id == item_id and update else item
        for item in _items(payslip, item_type)
    ]
    return recalc_payslip(payslip.model_copy(update={item_type.list_key: items}))


def create_overtime_item(
    base_salary: float,
    hours: float,
    rate: float = c.DEFAULT_OVERTIME_RATE,
    item_id: Optional[str] = None,
) -> PayslipItem:
    hourly_rate = base_salary / c.MONTHLY_WORKING_HOURS
    return PayslipItem(
        id=item_id or f"overtime-{int(time.time() * 1000)}",
        label=f"Overtime ({hours:g}h at {rate * 100:g}%)",
        amount=round2(hourly_rate * hours * rate),
        type=ItemType.EARNING,
        category=c.CATEGORY_OVERTIME,
        taxable=True,
        hours=hours,
        hourly_rate=hourly_rate,
    )


def sanitize_payslip(payslip: Payslip) -> Dict[str, Any]:
    """Document-ready dict without unset optional fields."""
    return payslip.model_dump(mode="json", exclude_none=True)


def normalize_payslip(raw: Mapping[str, Any]) -> Payslip:
    """Read a stored payslip, upgrading the legacy flat layout.

    Legacy payslips carry ``salary``/``bonus`` and a numeric ``deductions``
    field instead of item lists.
    """
    data = dict(raw)
    base_salary = data.get("base_salary")
    if base_salary is None:
        base_salary = data.get("salary") or 0.0
    bonus = data.get("bonus") or 0.0

    earnings = data.get("earnings")
    if not isinstance(earnings, list):
        earnings = [
            PayslipItem(
                id=c.BASE_SALARY_ITEM_ID,
                label="Base salary",
                amount=base_salary,
                type=ItemType.EARNING,
                category=c.CATEGORY_BASE,
                taxable=True,
            )
        ]
        if bonus > 0:
            earnings.append(
                PayslipItem(
                    id=c.BONUS_ITEM_ID,
                    label="Bonus",
                    amount=bonus,
                    type=ItemType.EARNING,
                    category=c.CATEGORY_BONUS,
                    taxable=True,
                )
            )
    else:
        earnings = [PayslipItem.model_validate(e) for e in earnings]

    deductions = data.get("deductions")
    if not isinstance(deductions, list):
        legacy_amount = float(deductions or 0.0)
        deductions = []
        if legacy_amount > 0:
            deductions.append(
                PayslipItem(
                    id="legacy-deduction",
                    label="Deductions",
                    amount=legacy_amount,
                    type=ItemType.DEDUCTION,
                    category=c.CATEGORY_CUSTOM,
                )
            )
    else:
        deductions = [PayslipItem.model_validate(d) for d in deductions]

    gross = sum_amount(earnings)
    total_deductions = sum_amount(deductions)
    net_pay = data.get("net_pay")
    if net_pay is None:
        net_pay = gross - total_deductions

    data.update(
        base_salary=base_salary,
        earnings=earnings,
        deductions=deductions,
        gross_salary=gross,
        total_deductions=total_deductions,
        net_pay=net_pay,
        period=data.get("period") or "",
    )
    return Payslip.model_validate(data)
