"""
Tests de l'assemblage des bulletins.
"""

import pytest
from decimal import Decimal

from src.errors import IncompleteInput, InvalidInput
from src.models.payslip import (
    AnnualCumulative,
    LeaveBalance,
    LeaveBalances,
    LineKind,
    PayPeriod,
    PayslipStatus,
)
from src.services.leave import LeaveBalanceTracker
from src.services.payslip_builder import PayslipBuilder


@pytest.fixture
def leave():
    return LeaveBalanceTracker().compute_all(Decimal("5"), Decimal("0"), conges_taken=Decimal("1"))


class TestPayslipBuild:

    def test_bulletin_complet(self, calculator, employee, company, leave):
        breakdown = calculator.compute(Decimal("2500"), Decimal("10"))
        payslip = PayslipBuilder().build(employee, company, "Juin 2025", breakdown, leave)

        assert payslip.id == ""
        assert payslip.status == PayslipStatus.GENERE
        assert payslip.employee_id == "emp-1"
        assert payslip.employee_name == "Marie Dupont"
        assert payslip.company.siret == "123 456 789 00012"
        assert payslip.period == "Juin 2025"
        assert (payslip.month, payslip.year) == (6, 2025)
        assert payslip.gross_salary == Decimal("2706.04")
        assert payslip.net_salary == payslip.gross_salary - payslip.total_deductions
        assert payslip.leave.conges.balance == Decimal("6.5")
        assert payslip.leave.rtt.balance == Decimal("1")

    def test_ordre_des_lignes(self, calculator, employee, company, leave):
        breakdown = calculator.compute(Decimal("2500"), Decimal("10"))
        payslip = PayslipBuilder().build(employee, company, "Juin 2025", breakdown, leave)

        assert [line.code for line in payslip.lines] == [
            "salaire_base", "heures_sup", "sante", "retraite", "chomage",
        ]
        assert [line.kind for line in payslip.lines] == [
            LineKind.EARNING, LineKind.EARNING,
            LineKind.DEDUCTION, LineKind.DEDUCTION, LineKind.DEDUCTION,
        ]
        assert payslip.lines[0].base == "151.67 h"
        assert payslip.lines[1].base == "10 h"
        assert payslip.lines[2].rate == "7.30 %"

    def test_sommes_des_lignes(self, calculator, employee, company, leave):
        breakdown = calculator.compute(Decimal("3120.55"), Decimal("4.5"), Decimal("50"))
        payslip = PayslipBuilder().build(employee, company, "Mars 2025", breakdown, leave)

        assert sum(line.amount for line in payslip.earnings) == payslip.gross_salary
        assert sum(line.amount for line in payslip.deductions) == payslip.total_deductions

    def test_pas_de_ligne_heures_sup_sans_heures(self, calculator, employee, company, leave):
        breakdown = calculator.compute(Decimal("2500"))
        payslip = PayslipBuilder().build(employee, company, "Juin 2025", breakdown, leave)

        assert "heures_sup" not in [line.code for line in payslip.lines]
        assert payslip.gross_salary == Decimal("2500")

    def test_cumul_annuel(self, calculator, employee, company, leave):
        breakdown = calculator.compute(Decimal("2000"))
        cumul = AnnualCumulative(gross_salary=Decimal("10000"), net_salary=Decimal("8715"), taxable_income=Decimal("8715"))
        payslip = PayslipBuilder().build(employee, company, "Juin 2025", breakdown, leave, cumul)

        assert payslip.annual_cumulative.gross_salary == Decimal("12000.00")
        assert payslip.annual_cumulative.net_salary == Decimal("8715") + breakdown.net_salary
        assert payslip.annual_cumulative.taxable_income == Decimal("8715") + breakdown.taxable_income

    def test_periode_en_minuscules(self, calculator, employee, company, leave):
        payslip = PayslipBuilder().build(employee, company, "février 2025", calculator.compute(Decimal("2000")), leave)

        assert payslip.period == "Février 2025"
        assert payslip.month == 2

    def test_instantane_independant(self, calculator, employee, company, leave):
        payslip = PayslipBuilder().build(employee, company, "Juin 2025", calculator.compute(Decimal("2000")), leave)
        employee.last_name = "Martin"

        assert payslip.employee.last_name == "Dupont"


class TestPayslipBuildErrors:

    def test_employe_manquant(self, calculator, employee, company, leave):
        employee.employee_id = "  "
        with pytest.raises(IncompleteInput):
            PayslipBuilder().build(employee, company, "Juin 2025", calculator.compute(Decimal("2000")), leave)

    def test_entreprise_manquante(self, calculator, employee, company, leave):
        company.company_id = ""
        with pytest.raises(IncompleteInput):
            PayslipBuilder().build(employee, company, "Juin 2025", calculator.compute(Decimal("2000")), leave)

    def test_periode_vide(self, calculator, employee, company, leave):
        with pytest.raises(IncompleteInput):
            PayslipBuilder().build(employee, company, " ", calculator.compute(Decimal("2000")), leave)

    def test_periode_illisible(self, calculator, employee, company, leave):
        with pytest.raises(InvalidInput):
            PayslipBuilder().build(employee, company, "Trimestre 2", calculator.compute(Decimal("2000")), leave)

    def test_brut_nul(self, calculator, employee, company, leave):
        breakdown = calculator.compute(Decimal("2000")).model_copy(update={"gross_salary": Decimal("0")})
        with pytest.raises(IncompleteInput):
            PayslipBuilder().build(employee, company, PayPeriod.from_month(2025, 6), breakdown, leave)

    def test_net_incoherent(self, calculator, employee, company, leave):
        breakdown = calculator.compute(Decimal("2000")).model_copy(update={"net_salary": Decimal("1900")})
        with pytest.raises(InvalidInput):
            PayslipBuilder().build(employee, company, "Juin 2025", breakdown, leave)

    def test_total_retenues_incoherent(self, calculator, employee, company, leave):
        breakdown = calculator.compute(Decimal("2000")).model_copy(update={"total_deductions": Decimal("1")})
        with pytest.raises(InvalidInput):
            PayslipBuilder().build(employee, company, "Juin 2025", breakdown, leave)

    def test_solde_conges_incoherent(self, calculator, employee, company):
        leave = LeaveBalances(conges=LeaveBalance(previous_balance=Decimal("5"), acquired=Decimal("2.5"), taken=Decimal("0"), balance=Decimal("10")))
        with pytest.raises(InvalidInput):
            PayslipBuilder().build(employee, company, "Juin 2025", calculator.compute(Decimal("2000")), leave)


class TestPayPeriod:

    def test_from_label(self):
        period = PayPeriod.from_label("aout 2024")

        assert period.label == "Août 2024"
        assert (period.month, period.year) == (8, 2024)

    def test_from_label_invalide(self):
        with pytest.raises(ValueError):
            PayPeriod.from_label("Juin")
