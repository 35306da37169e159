from __future__ import annotations

from schoolpay.models.payroll import Payroll, PayrollSummary


def summarize_payroll(payroll: Payroll) -> PayrollSummary:
    """Run-level totals for the summary screen."""
    payslips = payroll.payslips
    return PayrollSummary(
        payroll_id=payroll.id,
        period=payroll.period,
        status=payroll.status,
        staff_count=len(payslips),
        total_gross=sum(p.gross_salary for p in payslips),
        total_deductions=sum(p.total_deductions for p in payslips),
        total_net=sum(p.net_pay for p in payslips),
        total_employer_cnss=sum(p.employer_cnss or 0.0 for p in payslips),
        total_employer_amo=sum(p.employer_amo or 0.0 for p in payslips),
    )
