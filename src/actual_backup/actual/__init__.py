"""
Actual Sync Server Integration

HTTP client for the Actual sync server and the acquisition adapter that
downloads a budget into a backup workspace.
"""

from .adapter import ActualBudgetAdapter, budget_id_from_name
from .client import ActualServerClient, ActualServerError, RemoteBudgetFile

__all__ = [
    "ActualBudgetAdapter",
    "ActualServerClient",
    "ActualServerError",
    "RemoteBudgetFile",
    "budget_id_from_name",
]
