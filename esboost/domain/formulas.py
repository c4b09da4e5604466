"""
Mathematical formulas for permit runway planning.

These functions implement the derived metrics of an EU ETS permit
inventory: total capacity, runway in months and years, the share of
capacity already consumed and the buffer sizing. Each permit unit
represents exactly ``PERMIT_CAPACITY_T`` tonnes of CO₂.

All functions are pure: they depend solely on their inputs and do
not modify any external state. This makes them safe to unit test
individually.
"""

from math import ceil
from typing import Iterable, Optional, Union

from esboost.domain.models import PERMIT_CAPACITY_T


def total_capacity(active_permits: Union[int, float]) -> float:
    """Return the total capacity (tCO₂) covered by ``active_permits``."""
    return float(active_permits) * PERMIT_CAPACITY_T


def months_remaining(capacity_t: float, rate_t_per_month: float) -> float:
    """Compute how many months the capacity lasts at a constant rate.

    The rate must be strictly positive; callers validate it first.
    """
    return float(capacity_t) / float(rate_t_per_month)


def years_remaining(months: float) -> float:
    """Convert a runway in months into years."""
    return float(months) / 12


def consumed_pct(cumulative_emissions_t: float, capacity_t: float) -> float:
    """Return the share of capacity already used, in percent.

    With no capacity at all there is nothing left to consume, so the
    inventory is reported as fully used (100%).
    """
    if capacity_t <= 0:
        return 100.0
    return float(cumulative_emissions_t) / float(capacity_t) * 100


def needed_permits_for_buffer(
    capacity_t: float,
    rate_t_per_month: float,
    months: float,
    target_buffer_months: float,
) -> int:
    """Compute the additional whole permits required to hold the buffer.

    The capacity needed to cover the current runway plus the target
    buffer is:

        needed = rate * (months + target_buffer_months)

    Any shortfall against ``capacity_t`` is rounded up to whole permits.
    """
    total_needed = float(rate_t_per_month) * (float(months) + float(target_buffer_months))
    return max(0, int(ceil((total_needed - float(capacity_t)) / PERMIT_CAPACITY_T)))


def months_to_buffer(months: float, target_buffer_months: float) -> float:
    """Months until the buffer target is reached.

    Kept as ``target - (months - target)``, i.e. ``2 * target - months``,
    clamped at zero. For a short runway the value grows beyond the target
    itself.
    """
    return max(0.0, float(target_buffer_months) - (float(months) - float(target_buffer_months)))


def avg_monthly_rate(monthly_totals: Iterable[float]) -> Optional[float]:
    """Average of monthly emission totals, or ``None`` with no months."""
    values = [float(v) for v in monthly_totals]
    if not values:
        return None
    return sum(values) / len(values)
