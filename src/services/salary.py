"""Service de calcul du salaire brut, des cotisations et du net à payer."""

from decimal import Decimal, ROUND_HALF_UP

from src.errors import InvalidInput
from src.models.salary import DeductionLine, SalaryBreakdown, SalaryRates


CENT = Decimal("0.01")


def _arrondir(montant: Decimal) -> Decimal:
    """Arrondi commercial au centime."""
    return montant.quantize(CENT, rounding=ROUND_HALF_UP)


def _to_decimal(value, nom: str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except ArithmeticError as err:
        raise InvalidInput(f"{nom} n'est pas un nombre : {value!r}") from err


class SalaryCalculator:
    """
    Calcule le salaire brut, les cotisations salariales et le net.

    Calcul pur, sans effet de bord : une même instance peut être
    partagée entre plusieurs requêtes.

    Formules:
    - Taux horaire = salaire de base / durée légale mensuelle (151.67 h)
    - Heures sup = heures × taux horaire × (1 + majoration / 100)
    - Brut = salaire de base + heures sup
    - Chaque cotisation = brut × taux, arrondie au centime
    - Net = brut - somme des cotisations
    """

    def __init__(self, rates: SalaryRates | None = None):
        self.rates = rates or SalaryRates()

    def compute(
        self,
        base_salary: Decimal,
        overtime_hours: Decimal = Decimal("0"),
        overtime_rate: Decimal | None = None,
    ) -> SalaryBreakdown:
        """
        Calcule le détail du salaire d'une période.

        Args:
            base_salary: Salaire de base mensuel brut (> 0).
            overtime_hours: Heures supplémentaires (>= 0).
            overtime_rate: Majoration en pourcentage (>= 0). Défaut configuré si None.

        Returns:
            SalaryBreakdown avec brut, cotisations et net.

        Raises:
            InvalidInput: Si un montant est négatif ou si le salaire de base est nul.
        """
        base_salary = _to_decimal(base_salary, "Le salaire de base")
        overtime_hours = _to_decimal(overtime_hours if overtime_hours is not None else 0, "Les heures supplémentaires")
        if overtime_rate is None:
            overtime_rate = self.rates.overtime_default_rate
        overtime_rate = _to_decimal(overtime_rate, "La majoration")

        if not base_salary.is_finite() or _arrondir(base_salary) <= 0:
            raise InvalidInput(f"Le salaire de base doit être strictement positif au centime près (reçu {base_salary})")
        if not overtime_hours.is_finite() or overtime_hours < 0:
            raise InvalidInput(f"Les heures supplémentaires ne peuvent pas être négatives (reçu {overtime_hours})")
        if not overtime_rate.is_finite() or overtime_rate < 0:
            raise InvalidInput(f"La majoration ne peut pas être négative (reçu {overtime_rate})")

        heures_legales = self.rates.base_monthly_hours
        hourly_rate = base_salary / heures_legales
        overtime_amount = _arrondir(overtime_hours * hourly_rate * (1 + overtime_rate / 100))
        gross_salary = _arrondir(base_salary) + overtime_amount

        deductions = [
            DeductionLine(
                code=categorie.code,
                label=categorie.label,
                rate=categorie.rate,
                base=gross_salary,
                amount=_arrondir(gross_salary * categorie.rate),
                deductible=categorie.deductible,
            )
            for categorie in self.rates.deduction_categories()
        ]

        total_deductions = sum((d.amount for d in deductions), Decimal("0"))
        total_deductible = sum((d.amount for d in deductions if d.deductible), Decimal("0"))

        return SalaryBreakdown(
            base_salary=_arrondir(base_salary),
            overtime_hours=overtime_hours,
            overtime_rate=overtime_rate,
            base_monthly_hours=heures_legales,
            hourly_rate=_arrondir(hourly_rate),
            overtime_amount=overtime_amount,
            gross_salary=gross_salary,
            deductions=deductions,
            total_deductions=total_deductions,
            net_salary=gross_salary - total_deductions,
            taxable_income=gross_salary - total_deductible,
            hours_worked=heures_legales + overtime_hours,
        )
