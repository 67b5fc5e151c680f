"""Models package."""

from .payslip import (
    AnnualCumulative,
    CompanySnapshot,
    EmployeeSnapshot,
    LeaveBalance,
    LeaveBalances,
    LeaveInput,
    LineKind,
    LinkResult,
    PayPeriod,
    Payslip,
    PayslipFilter,
    PayslipLine,
    PayslipRequest,
    PayslipStatus,
    StatusUpdate,
)
from .salary import (
    DeductionCategory,
    DeductionLine,
    SalaryBreakdown,
    SalaryInput,
    SalaryRates,
)

__all__ = [
    "AnnualCumulative",
    "CompanySnapshot",
    "EmployeeSnapshot",
    "LeaveBalance",
    "LeaveBalances",
    "LeaveInput",
    "LineKind",
    "LinkResult",
    "PayPeriod",
    "Payslip",
    "PayslipFilter",
    "PayslipLine",
    "PayslipRequest",
    "PayslipStatus",
    "StatusUpdate",
    "DeductionCategory",
    "DeductionLine",
    "SalaryBreakdown",
    "SalaryInput",
    "SalaryRates",
]
