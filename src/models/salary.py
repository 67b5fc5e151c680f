"""Modèles pour le calcul du salaire brut / net."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class DeductionCategory(BaseModel):
    """Catégorie de cotisation salariale configurée."""

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., description="Code de la cotisation (ex: sante)")
    label: str = Field(..., description="Libellé affiché sur le bulletin")
    rate: Decimal = Field(..., ge=0, description="Taux appliqué au brut (0.073 = 7.3 %)")
    deductible: bool = Field(default=True, description="True si la cotisation est déductible du net imposable")


class SalaryRates(BaseModel):
    """
    Configuration immuable du calcul de salaire.

    Regroupe toutes les constantes du calcul (heures mensuelles légales,
    majoration par défaut, taux de cotisations). Les cotisations sont
    appliquées dans l'ordre : santé, retraite, chômage, puis les
    cotisations supplémentaires dans leur ordre de déclaration.
    """

    model_config = ConfigDict(frozen=True)

    base_monthly_hours: Decimal = Field(default=Decimal("151.67"), gt=0, description="Durée légale mensuelle (heures)")
    overtime_default_rate: Decimal = Field(default=Decimal("25"), ge=0, description="Majoration par défaut des heures sup (%)")
    health_insurance_rate: Decimal = Field(default=Decimal("0.073"), ge=0, description="Taux assurance maladie")
    pension_rate: Decimal = Field(default=Decimal("0.0315"), ge=0, description="Taux assurance vieillesse")
    unemployment_rate: Decimal = Field(default=Decimal("0.024"), ge=0, description="Taux assurance chômage")
    additional_deductions: tuple[DeductionCategory, ...] = Field(
        default=(),
        description="Cotisations supplémentaires, appliquées après les trois cotisations de base"
    )

    def deduction_categories(self) -> list[DeductionCategory]:
        """Liste ordonnée des cotisations à appliquer."""
        return [
            DeductionCategory(code="sante", label="Assurance maladie", rate=self.health_insurance_rate),
            DeductionCategory(code="retraite", label="Assurance vieillesse", rate=self.pension_rate),
            DeductionCategory(code="chomage", label="Assurance chômage", rate=self.unemployment_rate),
            *self.additional_deductions,
        ]

    @property
    def total_rate(self) -> Decimal:
        """Somme des taux de cotisations."""
        return sum((c.rate for c in self.deduction_categories()), Decimal("0"))


class DeductionLine(BaseModel):
    """Cotisation calculée sur le brut."""

    code: str
    label: str
    rate: Decimal = Field(..., description="Taux appliqué (fraction)")
    base: Decimal = Field(..., description="Base de calcul (salaire brut)")
    amount: Decimal = Field(..., ge=0, description="Montant retenu")
    deductible: bool = True


class SalaryBreakdown(BaseModel):
    """Résultat du calcul de salaire."""

    base_salary: Decimal = Field(..., description="Salaire de base mensuel brut")
    overtime_hours: Decimal = Field(default=Decimal("0"), description="Heures supplémentaires")
    overtime_rate: Decimal = Field(..., description="Majoration appliquée (%)")
    base_monthly_hours: Decimal = Field(..., description="Durée légale mensuelle utilisée")
    hourly_rate: Decimal = Field(..., description="Taux horaire de base")
    overtime_amount: Decimal = Field(default=Decimal("0"), description="Montant des heures supplémentaires")
    gross_salary: Decimal = Field(..., description="Salaire brut")
    deductions: list[DeductionLine] = Field(default_factory=list, description="Cotisations dans l'ordre de configuration")
    total_deductions: Decimal = Field(..., description="Total des retenues salariales")
    net_salary: Decimal = Field(..., description="Net à payer")
    taxable_income: Decimal = Field(..., description="Net imposable")
    hours_worked: Decimal = Field(..., description="Heures travaillées (légales + supplémentaires)")


class SalaryInput(BaseModel):
    """Données d'entrée d'une simulation de salaire."""

    base_salary: Decimal = Field(..., description="Salaire de base mensuel brut")
    overtime_hours: Decimal = Field(default=Decimal("0"), description="Heures supplémentaires")
    overtime_rate: Decimal | None = Field(default=None, description="Majoration (%), défaut configuré si absent")
