"""Priority assignment, change detection and the sort entry points."""

from ordering.assign import assign_priorities
from ordering.cache import FixedOrderCache
from ordering.detect import needs_sort, stale_reasons
from ordering.pipeline import (
    SortPlan,
    SortReport,
    apply_priorities,
    compute_priorities,
    run_sort,
)

__all__ = [
    "FixedOrderCache",
    "SortPlan",
    "SortReport",
    "apply_priorities",
    "assign_priorities",
    "compute_priorities",
    "needs_sort",
    "run_sort",
    "stale_reasons",
]
