"""Period parsing and working-day proration for mid-period hires."""
from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Tuple, Union

from schoolpay.payroll.deductions import round2

_MONTHS = {name.lower(): index for index, name in enumerate(calendar.month_name) if name}
_MONTHS.update({name.lower(): index for index, name in enumerate(calendar.month_abbr) if name})


@dataclass(frozen=True)
class Proration:
    prorated_base: float
    days_worked: int
    total_days: int

    @property
    def is_partial(self) -> bool:
        return self.days_worked != self.total_days


def parse_period(period: str, *, today: Optional[date] = None) -> Tuple[date, date]:
    """Return the first and last day of a period such as "July 2024".

    Falls back to the current month when the period cannot be parsed.
    """
    parts = period.strip().split()
    if len(parts) >= 2 and parts[0].lower() in _MONTHS and parts[1].isdigit():
        year, month = int(parts[1]), _MONTHS[parts[0].lower()]
    else:
        for fmt in ("%Y-%m", "%m/%Y"):
            try:
                parsed = datetime.strptime(period.strip(), fmt)
                year, month = parsed.year, parsed.month
                break
            except ValueError:
                continue
        else:
            today = today or date.today()
            year, month = today.year, today.month

    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def count_working_days(start: date, end: date) -> int:
    """Monday to Friday, both ends inclusive."""
    count = 0
    current = start
    while current <= end:
        if current.weekday() < 5:
            count += 1
        current += timedelta(days=1)
    return count


def calculate_prorated_base(
    base_salary: float,
    hire_date: Optional[Union[date, datetime]],
    period: str,
) -> Proration:
    start, end = parse_period(period)
    total_days = count_working_days(start, end)

    if hire_date is None:
        return Proration(round2(base_salary), total_days, total_days)

    hired = hire_date.date() if isinstance(hire_date, datetime) else hire_date
    if hired > end:
        return Proration(0.0, 0, total_days)

    effective_start = max(hired, start)
    days_worked = count_working_days(effective_start, end)
    if total_days == 0:
        return Proration(0.0, 0, 0)
    return Proration(round2(base_salary * days_worked / total_days), days_worked, total_days)
