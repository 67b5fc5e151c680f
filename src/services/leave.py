"""Suivi des soldes de congés payés et de RTT."""

from decimal import Decimal

from src.config import ACQUISITION_CONGES, ACQUISITION_RTT
from src.errors import InvalidInput
from src.models.payslip import LeaveBalance, LeaveBalances


def _jours(value, nom: str) -> Decimal:
    try:
        jours = value if isinstance(value, Decimal) else Decimal(str(value))
    except ArithmeticError as err:
        raise InvalidInput(f"{nom} n'est pas un nombre : {value!r}") from err
    if not jours.is_finite() or jours < 0:
        raise InvalidInput(f"{nom} ne peut pas être négatif (reçu {value})")
    return jours


class LeaveBalanceTracker:
    """
    Calcule les nouveaux soldes de congés d'une période.

    Règle: solde = solde précédent + acquis - pris, jamais négatif.

    Ne persiste rien : l'appelant reporte les nouveaux soldes sur la
    fiche de l'employé.
    """

    def __init__(
        self,
        conges_accrual: Decimal = ACQUISITION_CONGES,
        rtt_accrual: Decimal = ACQUISITION_RTT,
    ):
        self.conges_accrual = _jours(conges_accrual, "L'acquisition de congés")
        self.rtt_accrual = _jours(rtt_accrual, "L'acquisition de RTT")

    def compute_balance(
        self,
        prior_balance: Decimal,
        accrual_per_period: Decimal,
        taken_this_period: Decimal = Decimal("0"),
    ) -> LeaveBalance:
        """
        Calcule le solde de fin de période.

        Raises:
            InvalidInput: Si une valeur est négative ou si les jours pris
                dépassent le solde disponible.
        """
        prior = _jours(prior_balance, "Le solde précédent")
        acquired = _jours(accrual_per_period, "L'acquisition")
        taken = _jours(taken_this_period, "Le nombre de jours pris")

        disponible = prior + acquired
        if taken > disponible:
            raise InvalidInput(
                f"Jours pris ({taken}) supérieurs au solde disponible ({disponible})"
            )

        return LeaveBalance(
            previous_balance=prior,
            acquired=acquired,
            taken=taken,
            balance=disponible - taken,
        )

    def compute_all(
        self,
        prior_conges: Decimal = Decimal("0"),
        prior_rtt: Decimal = Decimal("0"),
        conges_taken: Decimal = Decimal("0"),
        rtt_taken: Decimal = Decimal("0"),
    ) -> LeaveBalances:
        """Calcule les soldes congés payés et RTT avec les acquisitions configurées."""
        return LeaveBalances(
            conges=self.compute_balance(prior_conges, self.conges_accrual, conges_taken),
            rtt=self.compute_balance(prior_rtt, self.rtt_accrual, rtt_taken),
        )


def check_leave_balance(leave: LeaveBalance) -> None:
    """
    Vérifie la cohérence d'un solde déjà calculé.

    Raises:
        InvalidInput: Si solde != précédent + acquis - pris ou si le solde est négatif.
    """
    attendu = leave.previous_balance + leave.acquired - leave.taken
    if leave.balance != attendu:
        raise InvalidInput(
            f"Solde incohérent : {leave.balance} au lieu de {attendu} "
            f"({leave.previous_balance} + {leave.acquired} - {leave.taken})"
        )
    if leave.balance < 0:
        raise InvalidInput(f"Solde de congés négatif : {leave.balance}")
