"""
Assemblage d'un bulletin de paie à partir des résultats de calcul.

Point de contrôle unique avant l'enregistrement : toutes les valeurs
calculées en amont sont vérifiées ici (brut = somme des gains,
retenues = somme des cotisations, net = brut - retenues, soldes de
congés cohérents).
"""

from datetime import date
from decimal import Decimal

from src.errors import IncompleteInput, InvalidInput
from src.models.payslip import (
    AnnualCumulative,
    CompanySnapshot,
    EmployeeSnapshot,
    LeaveBalances,
    LineKind,
    PayPeriod,
    Payslip,
    PayslipLine,
    PayslipStatus,
)
from src.models.salary import SalaryBreakdown
from src.services.leave import check_leave_balance


TOLERANCE = Decimal("0.01")


def _format_taux(rate: Decimal) -> str:
    """0.073 -> '7.30 %'"""
    return f"{rate * 100:.2f} %"


def _is_blank(value: str | None) -> bool:
    return value is None or not str(value).strip()


def _resolve_period(period: PayPeriod | str) -> PayPeriod:
    if isinstance(period, PayPeriod):
        if _is_blank(period.label):
            raise IncompleteInput("La période est obligatoire")
        return period
    if _is_blank(period):
        raise IncompleteInput("La période est obligatoire")
    try:
        return PayPeriod.from_label(period)
    except ValueError as err:
        raise InvalidInput(str(err)) from err


def _build_lines(breakdown: SalaryBreakdown) -> list[PayslipLine]:
    """Lignes dans l'ordre : salaire de base, heures sup, cotisations."""
    lines = [
        PayslipLine(
            code="salaire_base",
            label="Salaire de base",
            base=f"{breakdown.base_monthly_hours} h",
            rate=f"{breakdown.hourly_rate} €",
            amount=breakdown.base_salary,
            kind=LineKind.EARNING,
        )
    ]

    if breakdown.overtime_hours > 0:
        lines.append(PayslipLine(
            code="heures_sup",
            label=f"Heures supplémentaires majorées à {breakdown.overtime_rate} %",
            base=f"{breakdown.overtime_hours} h",
            rate=f"{breakdown.overtime_rate} %",
            amount=breakdown.overtime_amount,
            kind=LineKind.EARNING,
        ))

    for deduction in breakdown.deductions:
        lines.append(PayslipLine(
            code=deduction.code,
            label=deduction.label,
            base=f"{deduction.base} €",
            rate=_format_taux(deduction.rate),
            amount=deduction.amount,
            kind=LineKind.DEDUCTION,
        ))

    return lines


def _check_amounts(breakdown: SalaryBreakdown, lines: list[PayslipLine]) -> None:
    """Vérifie les invariants monétaires du bulletin."""
    for line in lines:
        if line.amount < 0:
            raise InvalidInput(f"Montant négatif sur la ligne '{line.label}' : {line.amount}")

    total_gains = sum((line.amount for line in lines if line.kind == LineKind.EARNING), Decimal("0"))
    total_retenues = sum((line.amount for line in lines if line.kind == LineKind.DEDUCTION), Decimal("0"))

    if abs(total_gains - breakdown.gross_salary) > TOLERANCE:
        raise InvalidInput(
            f"Brut incohérent : {breakdown.gross_salary} pour une somme des gains de {total_gains}"
        )
    if abs(total_retenues - breakdown.total_deductions) > TOLERANCE:
        raise InvalidInput(
            f"Total des retenues incohérent : {breakdown.total_deductions} pour une somme des cotisations de {total_retenues}"
        )
    if abs(breakdown.gross_salary - breakdown.total_deductions - breakdown.net_salary) > TOLERANCE:
        raise InvalidInput(
            f"Net incohérent : {breakdown.net_salary} au lieu de "
            f"{breakdown.gross_salary - breakdown.total_deductions}"
        )


class PayslipBuilder:
    """Construit un bulletin complet, prêt à être enregistré."""

    def build(
        self,
        employee: EmployeeSnapshot,
        company: CompanySnapshot,
        period: PayPeriod | str,
        breakdown: SalaryBreakdown,
        leave: LeaveBalances | None = None,
        annual_cumulative_to_date: AnnualCumulative | None = None,
        payment_date: date | None = None,
    ) -> Payslip:
        """
        Assemble un bulletin au statut "Généré", sans identifiant.

        Args:
            employee: Informations employé à figer sur le bulletin.
            company: Informations employeur à figer sur le bulletin.
            period: Période de paie ou son libellé ("Juin 2025").
            breakdown: Résultat du SalaryCalculator.
            leave: Soldes de congés de la période.
            annual_cumulative_to_date: Cumuls de l'année avant cette période.
            payment_date: Date de paiement prévue.

        Raises:
            IncompleteInput: Identifiant ou période manquant, brut nul.
            InvalidInput: Montants ou soldes incohérents.
        """
        if _is_blank(employee.employee_id):
            raise IncompleteInput("L'identifiant de l'employé est obligatoire")
        if _is_blank(company.company_id):
            raise IncompleteInput("L'identifiant de l'entreprise est obligatoire")
        pay_period = _resolve_period(period)
        if breakdown.gross_salary <= 0:
            raise IncompleteInput(f"Le salaire brut doit être strictement positif (reçu {breakdown.gross_salary})")

        leave = leave or LeaveBalances()
        check_leave_balance(leave.conges)
        check_leave_balance(leave.rtt)

        lines = _build_lines(breakdown)
        _check_amounts(breakdown, lines)

        cumul = annual_cumulative_to_date or AnnualCumulative()

        return Payslip(
            id="",
            employee_id=employee.employee_id,
            employee_name=employee.full_name,
            employee=employee.model_copy(deep=True),
            company=company.model_copy(deep=True),
            period=pay_period.label,
            month=pay_period.month,
            year=pay_period.year,
            base_salary=breakdown.base_salary,
            overtime_hours=breakdown.overtime_hours,
            overtime_rate=breakdown.overtime_rate,
            hourly_rate=breakdown.hourly_rate,
            hours_worked=breakdown.hours_worked,
            gross_salary=breakdown.gross_salary,
            total_deductions=breakdown.total_deductions,
            net_salary=breakdown.net_salary,
            taxable_income=breakdown.taxable_income,
            lines=lines,
            leave=leave.model_copy(deep=True),
            annual_cumulative=AnnualCumulative(
                gross_salary=cumul.gross_salary + breakdown.gross_salary,
                net_salary=cumul.net_salary + breakdown.net_salary,
                taxable_income=cumul.taxable_income + breakdown.taxable_income,
            ),
            status=PayslipStatus.GENERE,
            payment_date=payment_date,
        )
