"""
Reporting module for web-macro.

Provides account statistics and run summaries.
"""

from web_macro.reporting.stats import AccountStats, compute_stats
from web_macro.reporting.run_report import RunSummary

__all__ = [
    "AccountStats",
    "compute_stats",
    "RunSummary",
]
