"""Routes de simulation : salaire et soldes de congés."""

from fastapi import APIRouter, Depends

from src.errors import PayrollError
from src.models.payslip import LeaveBalance, LeaveInput
from src.models.salary import SalaryBreakdown, SalaryInput
from src.services.payslip_generation import PayslipService
from src.app.service.payslips import get_payslip_service, to_http_error

router = APIRouter()


@router.post("/salaire/calcul", response_model=SalaryBreakdown)
async def calculer_salaire(
    data: SalaryInput,
    service: PayslipService = Depends(get_payslip_service),
) -> SalaryBreakdown:
    """
    Simule le calcul brut / net sans rien enregistrer.

    Les cotisations sont appliquées dans l'ordre configuré
    (santé, retraite, chômage, puis cotisations supplémentaires).
    """
    try:
        return service.calculator.compute(data.base_salary, data.overtime_hours, data.overtime_rate)
    except PayrollError as e:
        raise to_http_error(e)


@router.post("/conges/solde", response_model=LeaveBalance)
async def calculer_solde_conges(
    data: LeaveInput,
    service: PayslipService = Depends(get_payslip_service),
) -> LeaveBalance:
    """Solde de fin de période = solde précédent + acquis - pris."""
    tracker = service.tracker
    accrual = data.accrual
    if accrual is None:
        accrual = tracker.rtt_accrual if data.leave_type == "rtt" else tracker.conges_accrual
    try:
        return tracker.compute_balance(data.prior_balance, accrual, data.taken)
    except PayrollError as e:
        raise to_http_error(e)
