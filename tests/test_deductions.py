import pytest

from schoolpay.models.payroll import ItemType, PayslipItem
from schoolpay.payroll import constants as c
from schoolpay.payroll.deductions import (
    calculate_amo,
    calculate_cnss,
    calculate_employer_cnss,
    calculate_ir,
    calculate_taxable_income,
    recalculate_deductions,
)


def earning(amount, item_id="base-salary", taxable=True):
    return PayslipItem(id=item_id, label="Base", amount=amount, type=ItemType.EARNING, category="base", taxable=taxable)


def deduction(item_id, category, amount=0.0, rate=None):
    return PayslipItem(id=item_id, label=item_id, amount=amount, type=ItemType.DEDUCTION, category=category, rate=rate)


def test_cnss_is_capped():
    assert calculate_cnss(4000) == pytest.approx(171.6)
    assert calculate_cnss(20000) == calculate_cnss(6000) == pytest.approx(257.4)
    assert calculate_employer_cnss(20000) == pytest.approx(773.4)


def test_amo_is_uncapped():
    assert calculate_amo(10000) == pytest.approx(226.0)


@pytest.mark.parametrize(
    "taxable, expected",
    [
        (0, 0.0),
        (2500, 0.0),
        (3000, 50.0),
        (5000, 333.33),
    ],
)
def test_ir_brackets(taxable, expected):
    assert calculate_ir(taxable) == pytest.approx(expected)


def test_taxable_income_excludes_non_taxable_earnings_and_social_contributions():
    earnings = [earning(8000), earning(500, item_id="transport", taxable=False)]
    deductions = [deduction("cnss", "cnss", 257.4), deduction("loan", "custom", 300)]
    assert calculate_taxable_income(earnings, deductions) == pytest.approx(8000 - 257.4)


def test_percentage_deduction_follows_gross():
    updated = recalculate_deductions(
        [earning(10000), earning(2000, item_id="bonus")],
        [deduction("withholding", "withholding", amount=1000, rate=0.10)],
    )
    assert updated[0].amount == pytest.approx(1200)


def test_custom_deductions_pass_through():
    loan = deduction("loan", "custom", amount=450, rate=0.5)
    updated = recalculate_deductions([earning(10000)], [loan])
    assert updated == [loan]


def test_empty_earnings_resolve_percentages_to_zero():
    deductions = [
        deduction("withholding", "withholding", amount=1000, rate=0.10),
        deduction("cnss", "cnss", amount=257.4),
        deduction("amo", "amo", amount=226),
    ]
    updated = recalculate_deductions([], deductions)
    assert [d.amount for d in updated] == [0, 0, 0]


def test_inputs_are_not_mutated():
    deductions = [deduction("withholding", "withholding", amount=5, rate=0.10)]
    recalculate_deductions([earning(10000)], deductions)
    assert deductions[0].amount == 5


def test_existing_ir_line_is_refreshed():
    deductions = [
        deduction("cnss", "cnss"),
        deduction("amo", "amo"),
        deduction(c.IR_ITEM_ID, c.CATEGORY_TAX, amount=1.0),
    ]
    updated = recalculate_deductions([earning(10000)], deductions)
    cnss, amo, ir = updated
    assert cnss.amount == pytest.approx(257.4)
    assert amo.amount == pytest.approx(226.0)
    assert ir.amount == pytest.approx(calculate_ir(10000 - 257.4 - 226.0))


def test_ir_line_added_for_statutory_payslips_only():
    statutory = recalculate_deductions([earning(10000)], [deduction("cnss", "cnss"), deduction("amo", "amo")])
    assert [d.id for d in statutory] == ["cnss", "amo", c.IR_ITEM_ID]

    flat = recalculate_deductions([earning(10000)], [deduction("withholding", "withholding", rate=0.10)])
    assert [d.id for d in flat] == ["withholding"]


def test_no_ir_line_below_threshold():
    updated = recalculate_deductions([earning(2000)], [deduction("cnss", "cnss"), deduction("amo", "amo")])
    assert [d.id for d in updated] == ["cnss", "amo"]
