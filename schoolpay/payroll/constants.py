"""Payroll rates, bracket tables and canonical item identifiers.

Rates are fractions (0.0429 == 4.29%).
"""

BASE_SALARY_ITEM_ID = "base-salary"
BONUS_ITEM_ID = "bonus"
WITHHOLDING_ITEM_ID = "withholding"
IR_ITEM_ID = "ir"

# Item categories
CATEGORY_BASE = "base"
CATEGORY_BONUS = "bonus"
CATEGORY_OVERTIME = "overtime"
CATEGORY_CUSTOM = "custom"
CATEGORY_WITHHOLDING = "withholding"
CATEGORY_CNSS = "cnss"
CATEGORY_AMO = "amo"
CATEGORY_CIMR = "cimr"
CATEGORY_TAX = "tax"

# Deductions subtracted from taxable earnings before income tax
PRE_TAX_CATEGORIES = frozenset({CATEGORY_CNSS, CATEGORY_AMO, CATEGORY_CIMR})
STATUTORY_CATEGORIES = frozenset({CATEGORY_CNSS, CATEGORY_AMO})

DEFAULT_FLAT_DEDUCTION_RATE = 0.10

CNSS_EMPLOYEE_RATE = 0.0429
CNSS_EMPLOYER_RATE = 0.1289
CNSS_SALARY_CAP = 6000.0
AMO_EMPLOYEE_RATE = 0.0226
AMO_EMPLOYER_RATE = 0.0411

# Monthly income tax brackets: (upper bound, rate)
IR_BRACKETS = (
    (2500.0, 0.0),
    (4166.67, 0.10),
    (5000.0, 0.20),
    (6666.67, 0.30),
    (15000.0, 0.34),
    (float("inf"), 0.38),
)

# 44h/week * 52 weeks / 12 months
MONTHLY_WORKING_HOURS = 191
DEFAULT_OVERTIME_RATE = 1.25

SCHEME_FLAT = "flat"
SCHEME_STATUTORY = "statutory"
