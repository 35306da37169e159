"""Deduction formulas and the deduction recalculator."""
from __future__ import annotations

from typing import Iterable, List

from schoolpay.models.payroll import ItemType, PayslipItem
from schoolpay.payroll import constants as c


def round2(value: float) -> float:
    return round(value, 2)


def sum_amount(items: Iterable[PayslipItem]) -> float:
    return sum((item.amount or 0.0) for item in items)


def calculate_cnss(gross: float) -> float:
    """Employee CNSS contribution, capped base."""
    return round2(min(gross, c.CNSS_SALARY_CAP) * c.CNSS_EMPLOYEE_RATE)


def calculate_amo(gross: float) -> float:
    """Employee AMO (health insurance) contribution."""
    return round2(gross * c.AMO_EMPLOYEE_RATE)


def calculate_employer_cnss(gross: float) -> float:
    return round2(min(gross, c.CNSS_SALARY_CAP) * c.CNSS_EMPLOYER_RATE)


def calculate_employer_amo(gross: float) -> float:
    return round2(gross * c.AMO_EMPLOYER_RATE)


def calculate_ir(taxable_income: float) -> float:
    """Progressive monthly income tax."""
    tax = 0.0
    prev_band = 0.0
    for band, rate in c.IR_BRACKETS:
        if taxable_income <= prev_band:
            break
        tax += (min(taxable_income, band) - prev_band) * rate
        prev_band = band
        if taxable_income <= band:
            break
    return round2(tax)


def calculate_taxable_income(earnings: List[PayslipItem], deductions: List[PayslipItem]) -> float:
    """Taxable earnings minus pre-tax social contributions."""
    taxable_earnings = sum_amount(e for e in earnings if e.taxable is not False)
    pre_tax = sum_amount(d for d in deductions if (d.category or "") in c.PRE_TAX_CATEGORIES)
    return taxable_earnings - pre_tax


def percentage_deduction(rate: float, gross: float) -> float:
    return rate * gross


def make_ir_item(amount: float) -> PayslipItem:
    return PayslipItem(
        id=c.IR_ITEM_ID,
        label="IR (Impôt sur le Revenu)",
        amount=amount,
        type=ItemType.DEDUCTION,
        category=c.CATEGORY_TAX,
        taxable=False,
    )


def _refresh(item: PayslipItem, gross: float) -> PayslipItem:
    category = item.category or ""
    if category == c.CATEGORY_CUSTOM or category == c.CATEGORY_TAX:
        return item
    if category == c.CATEGORY_CNSS:
        return item.model_copy(update={"amount": calculate_cnss(gross)})
    if category == c.CATEGORY_AMO:
        return item.model_copy(update={"amount": calculate_amo(gross)})
    if item.rate is not None:
        return item.model_copy(update={"amount": percentage_deduction(item.rate, gross)})
    return item


def recalculate_deductions(earnings: List[PayslipItem], deductions: List[PayslipItem]) -> List[PayslipItem]:
    """Refresh formula-driven deductions against the current earnings.

    Custom (manually entered) deductions pass through untouched. Inputs are
    not modified; a new list is returned in the original order. With no
    earnings the gross is 0 and every percentage deduction resolves to 0.
    """
    gross = sum_amount(earnings)
    updated = [_refresh(d, gross) for d in deductions]

    ir = calculate_ir(calculate_taxable_income(earnings, updated))
    ir_index = next(
        (i for i, d in enumerate(updated) if d.category == c.CATEGORY_TAX and d.id == c.IR_ITEM_ID),
        None,
    )
    if ir_index is not None:
        updated[ir_index] = updated[ir_index].model_copy(update={"amount": ir})
    elif ir > 0 and any((d.category or "") in c.STATUTORY_CATEGORIES for d in updated):
        updated.append(make_ir_item(ir))

    return updated
