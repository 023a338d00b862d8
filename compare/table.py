"""
Side-by-side comparison table.

Each Metric knows how to pull one value out of a Program and, optionally,
whether a higher or lower number is better. For a metric with a polarity
the best numeric value across the compared programs is highlighted, but
only when at least two programs have a number to compare.

Public API:
    METRICS
    best_value(metric, programs) → float | None
    build_table(programs, ranked_departments) → ComparisonTable
    page_title(programs) / decision_prompt(programs)
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from numbers import Real
from typing import Any

from pydantic import BaseModel

from catalog.models import Program

SITE_NAME = "Major Explorer"
NOT_AVAILABLE = "N/A"


@dataclass(frozen=True)
class Metric:
    label: str
    get_value: Callable[[Program, int], Any]
    higher_is_better: bool | None = None
    is_numeric: bool = False
    is_currency: bool = False


def _department_rank(p: Program, ranked_departments: int) -> str:
    dept = p.department
    if dept is None or not dept.total_enrollment_fall_2021:
        return NOT_AVAILABLE
    return f"{dept.total_enrollment_fall_2021} (Rank {dept.rank} of {ranked_departments})"


METRICS: tuple[Metric, ...] = (
    Metric("College", lambda p, _: p.department.college_name if p.department else None),
    Metric("Department", lambda p, _: p.department.department_name if p.department else None),
    Metric("Department Enrollment & Rank", _department_rank),
    Metric("Degree Type", lambda p, _: p.expanded_degree_type),
    Metric("Credential Level", lambda p, _: p.credential_level),
    Metric("Program Credits (25-26)", lambda p, _: p.program_credits, higher_is_better=False),
    Metric("Total Credits", lambda p, _: p.total_credits, higher_is_better=False, is_numeric=True),
    Metric("Enrollment (Fall 2021)", lambda p, _: p.enrollment_fall_2021,
           higher_is_better=True, is_numeric=True),
    Metric("Graduates (FY 2021)", lambda p, _: p.graduates_total,
           higher_is_better=True, is_numeric=True),
    Metric("Median Salary (MN 24-25)", lambda p, _: p.median_salary,
           higher_is_better=True, is_numeric=True, is_currency=True),
)


# ---------------------------------------------------------------------------
# Best value
# ---------------------------------------------------------------------------

def is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def best_of(values: Sequence[Any], higher_is_better: bool | None) -> float | None:
    """Max/min of the numeric values, or None with no polarity or fewer than two numbers."""
    if higher_is_better is None:
        return None
    numbers = [v for v in values if is_number(v)]
    if len(numbers) < 2:
        return None
    return max(numbers) if higher_is_better else min(numbers)


def best_value(metric: Metric, programs: Sequence[Program], ranked_departments: int = 0) -> float | None:
    values = [metric.get_value(p, ranked_departments) for p in programs]
    return best_of(values, metric.higher_is_better)


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------

def _plain(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_value(value: Any, is_currency: bool = False) -> str:
    if value is None:
        return NOT_AVAILABLE
    if is_currency and is_number(value):
        return "$" + (f"{value:,.0f}" if float(value).is_integer() else f"{value:,}")
    return _plain(value)


class Cell(BaseModel):
    display: str
    is_best: bool = False


class Row(BaseModel):
    label: str
    numeric: bool
    cells: list[Cell]


class ComparisonTable(BaseModel):
    program_ids: list[str]
    program_names: list[str]
    rows: list[Row]


def build_table(programs: Sequence[Program], ranked_departments: int = 0) -> ComparisonTable:
    rows = []
    for metric in METRICS:
        values = [metric.get_value(p, ranked_departments) for p in programs]
        best = best_of(values, metric.higher_is_better)
        cells = [
            Cell(
                display=format_value(v, metric.is_currency),
                is_best=best is not None and is_number(v) and v == best,
            )
            for v in values
        ]
        rows.append(Row(label=metric.label, numeric=metric.is_numeric, cells=cells))

    return ComparisonTable(
        program_ids=[p.program_id for p in programs],
        program_names=[p.program_name for p in programs],
        rows=rows,
    )


def page_title(programs: Sequence[Program]) -> str:
    if not programs:
        return f"Compare Programs | {SITE_NAME}"
    return f"{' vs '.join(p.program_name for p in programs)} | {SITE_NAME}"


def decision_prompt(programs: Sequence[Program]) -> str:
    """Opening advisor question for a user who can't pick between the compared programs."""
    names = ", ".join(p.program_name for p in programs)
    return (
        f"I'm trying to decide between these majors: {names}. "
        "Can you help me understand the key differences and ask some questions "
        "to help me figure out which one is a better fit for me?"
    )
