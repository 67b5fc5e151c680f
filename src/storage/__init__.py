"""Storage package."""

from .document_store import (
    DocumentStore,
    InMemoryDocumentStore,
    execute_with_retry,
)
from .payslip_repository import (
    PayslipRepository,
    reject_duplicate_period,
)
from .employee_linker import EmployeePayslipLinker
from .directory import EmployeeDirectory

__all__ = [
    "DocumentStore",
    "InMemoryDocumentStore",
    "execute_with_retry",
    "PayslipRepository",
    "reject_duplicate_period",
    "EmployeePayslipLinker",
    "EmployeeDirectory",
]
