"""
Worker modules for the SAP Employee Basic Data Adapter
"""

from .employee_sync import BranchResult, EmployeeSyncWorker

__all__ = [
    "BranchResult",
    "EmployeeSyncWorker",
]
