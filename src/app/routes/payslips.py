"""Routes de génération et de suivi des bulletins de paie."""

from decimal import Decimal

from fastapi import APIRouter, Depends, Query

from src.errors import PayrollError
from src.models.payslip import LinkResult, Payslip, PayslipFilter, PayslipRequest, PayslipStatus, StatusUpdate
from src.services.payslip_generation import PayslipService
from src.app.service.payslips import get_payslip_service, to_http_error

router = APIRouter()


@router.post("/payslips", response_model=Payslip, status_code=201)
async def generer_bulletin(
    data: PayslipRequest,
    service: PayslipService = Depends(get_payslip_service),
) -> Payslip:
    """
    Génère un bulletin de paie, l'enregistre et le lie à l'employé.

    ## Calcul
    - Taux horaire = salaire de base / 151.67 h
    - Heures sup = heures × taux horaire × (1 + majoration / 100)
    - Cotisations = brut × taux configurés
    - Net = brut - cotisations

    ## Relance
    Une requête renvoyée avec la même `idempotency_key` retourne le
    bulletin déjà généré.
    """
    try:
        return await service.generate_payslip(
            employee_id=data.employee_id,
            company_id=data.company_id,
            period=data.period,
            base_salary=data.base_salary,
            overtime_hours=data.overtime_hours,
            overtime_rate=data.overtime_rate,
            conges_taken=data.conges_taken,
            rtt_taken=data.rtt_taken,
            payment_date=data.payment_date,
            idempotency_key=data.idempotency_key,
        )
    except PayrollError as e:
        raise to_http_error(e)


@router.get("/payslips", response_model=list[Payslip])
async def rechercher_bulletins(
    employee_id: str | None = None,
    company_id: str | None = None,
    month: int | None = Query(default=None, ge=1, le=12),
    year: int | None = None,
    status: PayslipStatus | None = None,
    min_amount: Decimal | None = None,
    max_amount: Decimal | None = None,
    service: PayslipService = Depends(get_payslip_service),
) -> list[Payslip]:
    """
    Liste les bulletins, du plus récent au plus ancien.

    Tous les critères sont optionnels ; `min_amount` et `max_amount`
    portent sur le net à payer.
    """
    filters = PayslipFilter(
        employee_id=employee_id,
        company_id=company_id,
        month=month,
        year=year,
        status=status,
        min_amount=min_amount,
        max_amount=max_amount,
    )
    try:
        return await service.search(filters)
    except PayrollError as e:
        raise to_http_error(e)


@router.get("/payslips/{payslip_id}", response_model=Payslip)
async def lire_bulletin(
    payslip_id: str,
    service: PayslipService = Depends(get_payslip_service),
) -> Payslip:
    try:
        return await service.get(payslip_id)
    except PayrollError as e:
        raise to_http_error(e)


@router.patch("/payslips/{payslip_id}/status", response_model=Payslip)
async def changer_statut(
    payslip_id: str,
    data: StatusUpdate,
    service: PayslipService = Depends(get_payslip_service),
) -> Payslip:
    """Fait avancer le statut : Généré → Envoyé → Validé. Aucun retour arrière."""
    try:
        return await service.update_status(payslip_id, data.status)
    except PayrollError as e:
        raise to_http_error(e)


@router.get("/employees/{employee_id}/payslips", response_model=list[Payslip])
async def bulletins_employe(
    employee_id: str,
    service: PayslipService = Depends(get_payslip_service),
) -> list[Payslip]:
    """Bulletins de l'employé, du plus récent au plus ancien."""
    try:
        return await service.list_for_employee(employee_id)
    except PayrollError as e:
        raise to_http_error(e)


@router.post("/employees/{employee_id}/payslips/{payslip_id}/link", response_model=LinkResult)
async def lier_bulletin(
    employee_id: str,
    payslip_id: str,
    service: PayslipService = Depends(get_payslip_service),
) -> LinkResult:
    """Relance la liaison d'un bulletin déjà enregistré. Sans effet s'il est déjà lié."""
    try:
        return await service.relink(employee_id, payslip_id)
    except PayrollError as e:
        raise to_http_error(e)
