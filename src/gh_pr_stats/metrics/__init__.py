"""Summary metrics over fetched pull requests."""

from gh_pr_stats.metrics.summary import Summary, SummaryReducer, TurnaroundRange

__all__ = [
    "Summary",
    "SummaryReducer",
    "TurnaroundRange",
]
