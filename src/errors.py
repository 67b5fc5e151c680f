"""Exceptions du module de paie."""


class PayrollError(Exception):
    """Erreur de base du calcul et du cycle de vie des bulletins."""


class InvalidInput(PayrollError, ValueError):
    """Donnée numérique invalide ou hors bornes (ex: salaire négatif)."""


class IncompleteInput(InvalidInput):
    """Identifiant obligatoire manquant (employé, entreprise, période)."""


class InvalidTransition(PayrollError):
    """Changement de statut interdit (retour en arrière)."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Transition de statut interdite : '{current}' → '{requested}'")


class NotFound(PayrollError, LookupError):
    """
    Enregistrement référencé introuvable (employé, entreprise, bulletin).

    Levée après l'enregistrement d'un bulletin (employé supprimé entre
    la lecture et la liaison), elle porte le bulletin dans `payslip`
    pour que l'appelant puisse l'annuler ou relancer la liaison.
    """

    def __init__(self, collection: str, document_id: str, payslip=None):
        self.collection = collection
        self.document_id = document_id
        self.payslip = payslip
        super().__init__(f"Document introuvable : {collection}/{document_id}")


class PersistenceError(PayrollError):
    """
    Échec d'accès au stockage (indisponible ou écriture refusée).

    Erreur transitoire : l'appelant peut relancer l'étape qui a échoué.
    Si le bulletin a déjà été enregistré avant l'échec, il est disponible
    dans `payslip` pour ne relancer que la liaison.
    """

    def __init__(self, message: str, payslip=None):
        self.payslip = payslip
        super().__init__(message)


class DuplicatePayslip(PayrollError):
    """Un bulletin existe déjà pour cet employé sur cette période."""

    def __init__(self, employee_id: str, period: str, existing_id: str):
        self.employee_id = employee_id
        self.period = period
        self.existing_id = existing_id
        super().__init__(
            f"Un bulletin existe déjà pour l'employé {employee_id} sur la période {period} ({existing_id})"
        )
