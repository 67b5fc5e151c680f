"""
Modèles Pydantic des bulletins de paie.
"""

import re
import unicodedata
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


MOIS_FR = [
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
]


def _sans_accents(value: str) -> str:
    return "".join(
        c for c in unicodedata.normalize("NFD", value) if unicodedata.category(c) != "Mn"
    )


class PayslipStatus(str, Enum):
    """Statut d'un bulletin. L'ordre de déclaration est l'ordre du cycle de vie."""
    GENERE = "Généré"
    ENVOYE = "Envoyé"
    VALIDE = "Validé"

    @property
    def rank(self) -> int:
        return list(PayslipStatus).index(self)


class LineKind(str, Enum):
    """Nature d'une ligne du bulletin."""
    EARNING = "earning"
    DEDUCTION = "deduction"


class EmployeeSnapshot(BaseModel):
    """Informations sur l'employé, figées à la génération du bulletin."""

    employee_id: str = Field(..., description="Identifiant de l'employé")
    first_name: str = Field(default="", description="Prénom")
    last_name: str = Field(default="", description="Nom de famille")
    role: str | None = Field(default=None, description="Intitulé du poste")
    social_security_number: str | None = Field(default=None, description="Numéro de sécurité sociale")
    start_date: date | None = Field(default=None, description="Date d'entrée dans l'entreprise")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class CompanySnapshot(BaseModel):
    """Informations sur l'employeur, figées à la génération du bulletin."""

    company_id: str = Field(..., description="Identifiant de l'entreprise")
    name: str = Field(default="", description="Raison sociale")
    address: str | None = Field(default=None, description="Adresse formatée sur une ligne")
    siret: str | None = Field(default=None, description="Numéro SIRET")


class PayPeriod(BaseModel):
    """Période de paie."""

    label: str = Field(..., description="Libellé de la période (ex: Juin 2025)")
    month: int = Field(..., ge=1, le=12, description="Mois de la paie")
    year: int = Field(..., ge=1900, description="Année de la paie")

    @classmethod
    def from_label(cls, label: str) -> "PayPeriod":
        """
        Construit une période depuis un libellé français ("juin 2025", "Juin 2025").

        Raises:
            ValueError: Si le libellé n'est pas reconnu.
        """
        match = re.fullmatch(r"\s*([^\W\d_]+)\s+(\d{4})\s*", label or "")
        if not match:
            raise ValueError(f"Période non reconnue : '{label}'")
        mois = _sans_accents(match.group(1).lower())
        noms = [_sans_accents(m) for m in MOIS_FR]
        if mois not in noms:
            raise ValueError(f"Mois non reconnu : '{match.group(1)}'")
        month = noms.index(mois) + 1
        return cls(label=f"{MOIS_FR[month - 1].capitalize()} {match.group(2)}", month=month, year=int(match.group(2)))

    @classmethod
    def from_month(cls, year: int, month: int) -> "PayPeriod":
        return cls(label=f"{MOIS_FR[month - 1].capitalize()} {year}", month=month, year=year)


class PayslipLine(BaseModel):
    """Ligne de rémunération ou de cotisation du bulletin de paie."""

    code: str = Field(..., description="Code de la rubrique")
    label: str = Field(..., description="Libellé de la ligne")
    base: str | None = Field(default=None, description="Base affichée (ex: 151.67 h)")
    rate: str | None = Field(default=None, description="Taux affiché (ex: 6.75 %)")
    amount: Decimal = Field(..., ge=0, description="Montant")
    kind: LineKind = Field(..., description="Gain ou retenue")


class LeaveBalance(BaseModel):
    """Solde d'un type de congé (congés payés ou RTT) sur la période."""

    previous_balance: Decimal = Field(default=Decimal("0"), ge=0, description="Solde en début de période")
    acquired: Decimal = Field(default=Decimal("0"), ge=0, description="Jours acquis sur la période")
    taken: Decimal = Field(default=Decimal("0"), ge=0, description="Jours pris sur la période")
    balance: Decimal = Field(default=Decimal("0"), ge=0, description="Solde en fin de période")


class LeaveBalances(BaseModel):
    """Soldes des congés reportés sur le bulletin."""

    conges: LeaveBalance = Field(default_factory=LeaveBalance, description="Congés payés")
    rtt: LeaveBalance = Field(default_factory=LeaveBalance, description="RTT")


class AnnualCumulative(BaseModel):
    """Cumuls depuis janvier."""

    gross_salary: Decimal = Field(default=Decimal("0"), description="Cumul brut")
    net_salary: Decimal = Field(default=Decimal("0"), description="Cumul net payé")
    taxable_income: Decimal = Field(default=Decimal("0"), description="Cumul net imposable")


class Payslip(BaseModel):
    """
    Bulletin de paie complet.

    Contient toutes les informations nécessaires au rendu du document,
    sans autre lecture du stockage. Construit par PayslipBuilder, jamais
    modifié ensuite hormis l'identifiant, les dates d'enregistrement et
    le statut.
    """

    id: str = Field(default="", description="Identifiant attribué à l'enregistrement")

    # Identités figées
    employee_id: str = Field(..., description="Identifiant de l'employé")
    employee_name: str = Field(..., description="Nom complet de l'employé")
    employee: EmployeeSnapshot = Field(..., description="Informations employé")
    company: CompanySnapshot = Field(..., description="Informations employeur")

    # Période
    period: str = Field(..., description="Libellé de la période")
    month: int = Field(..., ge=1, le=12)
    year: int = Field(...)

    # Paramètres du calcul
    base_salary: Decimal = Field(..., description="Salaire de base")
    overtime_hours: Decimal = Field(default=Decimal("0"), description="Heures supplémentaires")
    overtime_rate: Decimal = Field(default=Decimal("0"), description="Majoration des heures sup (%)")
    hourly_rate: Decimal = Field(..., description="Taux horaire de base")
    hours_worked: Decimal = Field(..., description="Heures travaillées dans le mois")

    # Montants du mois
    gross_salary: Decimal = Field(..., description="Salaire brut")
    total_deductions: Decimal = Field(..., description="Total des retenues salariales")
    net_salary: Decimal = Field(..., description="Net à payer")
    taxable_income: Decimal = Field(..., description="Net imposable")

    lines: list[PayslipLine] = Field(default_factory=list, description="Lignes ordonnées du bulletin")
    leave: LeaveBalances = Field(default_factory=LeaveBalances, description="Soldes des congés")
    annual_cumulative: AnnualCumulative = Field(default_factory=AnnualCumulative, description="Cumuls annuels")

    status: PayslipStatus = Field(default=PayslipStatus.GENERE, description="Statut du bulletin")
    idempotency_key: str | None = Field(default=None, description="Clé fournie par l'appelant pour dédoublonner les enregistrements")
    created_at: datetime | None = Field(default=None, description="Date d'enregistrement")
    updated_at: datetime | None = Field(default=None, description="Date de dernière mise à jour du statut")
    payment_date: date | None = Field(default=None, description="Date de paiement")

    @property
    def earnings(self) -> list[PayslipLine]:
        return [line for line in self.lines if line.kind == LineKind.EARNING]

    @property
    def deductions(self) -> list[PayslipLine]:
        return [line for line in self.lines if line.kind == LineKind.DEDUCTION]


class LeaveInput(BaseModel):
    """Données d'entrée du calcul d'un solde de congés."""

    prior_balance: Decimal = Field(default=Decimal("0"), description="Solde précédent")
    accrual: Decimal | None = Field(default=None, description="Jours acquis sur la période, défaut configuré si absent")
    taken: Decimal = Field(default=Decimal("0"), description="Jours pris sur la période")
    leave_type: str = Field(default="conges", pattern="^(conges|rtt)$", description="conges ou rtt")


class PayslipRequest(BaseModel):
    """Demande de génération d'un bulletin."""

    employee_id: str = Field(..., description="Identifiant de l'employé")
    company_id: str = Field(..., description="Identifiant de l'entreprise")
    period: str = Field(..., description="Libellé de la période (ex: Juin 2025)")
    base_salary: Decimal = Field(..., description="Salaire de base mensuel brut")
    overtime_hours: Decimal = Field(default=Decimal("0"), description="Heures supplémentaires")
    overtime_rate: Decimal | None = Field(default=None, description="Majoration (%), défaut configuré si absent")
    conges_taken: Decimal = Field(default=Decimal("0"), description="Jours de congés payés pris")
    rtt_taken: Decimal = Field(default=Decimal("0"), description="Jours de RTT pris")
    payment_date: date | None = Field(default=None, description="Date de paiement")
    idempotency_key: str | None = Field(default=None, description="Clé de dédoublonnage des relances")


class StatusUpdate(BaseModel):
    """Demande de changement de statut."""

    status: PayslipStatus


class LinkResult(BaseModel):
    """Résultat de la liaison d'un bulletin à un employé."""

    employee_id: str
    payslip_id: str
    linked: bool = Field(..., description="True si la liste a été modifiée, False si le bulletin était déjà lié")


class PayslipFilter(BaseModel):
    """Critères de recherche des bulletins. Un critère absent ne filtre pas."""

    employee_id: str | None = Field(default=None, description="Identifiant de l'employé")
    company_id: str | None = Field(default=None, description="Identifiant de l'entreprise")
    month: int | None = Field(default=None, ge=1, le=12, description="Mois de la paie")
    year: int | None = Field(default=None, description="Année de la paie")
    status: PayslipStatus | None = Field(default=None, description="Statut du bulletin")
    min_amount: Decimal | None = Field(default=None, description="Net à payer minimum")
    max_amount: Decimal | None = Field(default=None, description="Net à payer maximum")
