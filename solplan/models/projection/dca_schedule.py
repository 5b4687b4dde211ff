# solplan/models/projection/dca_schedule.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Union

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

from solplan.models.errors import parse_choice
from solplan.models.projection.projection_calc import DcaFrequency

_STEP = {
    DcaFrequency.DAILY: relativedelta(days=1),
    DcaFrequency.WEEKLY: relativedelta(days=7),
    DcaFrequency.MONTHLY: relativedelta(months=1),
    DcaFrequency.YEARLY: relativedelta(years=1),
}


@dataclass
class DcaScheduleResult:
    """
    Contributions due since a plan was activated.

    Every due contribution counts as missed: executed purchases are not
    tracked, so completed_estimate is always 0.
    """
    next_dca_date: datetime
    missed_count: int
    missed_total: float
    total_due_count: int
    completed_estimate: int = 0
    all_due_dates: List[datetime] = field(default_factory=list)


def _as_datetime(value: Union[str, datetime]) -> datetime:
    return isoparse(value) if isinstance(value, str) else value


def _align(start: datetime, now: datetime):
    """A naive side is read as UTC when the other side carries a zone."""
    if (start.tzinfo is None) != (now.tzinfo is None):
        if start.tzinfo is None:
            start = start.replace(tzinfo=timezone.utc)
        else:
            now = now.replace(tzinfo=timezone.utc)
    return start, now


def calculate_dca_schedule(activated_at: Union[str, datetime],
                           frequency: Union[DcaFrequency, str],
                           amount_usd: float,
                           now: Optional[datetime] = None) -> DcaScheduleResult:
    frequency = parse_choice(DcaFrequency, frequency, "frequency")
    start = _as_datetime(activated_at)
    start, now = _align(start, now or datetime.now(tz=start.tzinfo))

    # relativedelta from the anchor clamps month ends (Jan 31 -> Feb 28 -> Mar 31)
    step = _STEP[frequency]
    due: List[datetime] = []
    n = 1
    dca_date = start + step
    while dca_date <= now:
        due.append(dca_date)
        n += 1
        dca_date = start + step * n

    return DcaScheduleResult(
        next_dca_date=dca_date,
        missed_count=len(due),
        missed_total=len(due) * float(amount_usd),
        total_due_count=len(due),
        all_due_dates=due,
    )


def days_since(iso_date: Union[str, datetime], now: Optional[datetime] = None) -> int:
    start = _as_datetime(iso_date)
    start, now = _align(start, now or datetime.now(tz=start.tzinfo))
    return (now - start).days
