"""Liaison des bulletins à la fiche de l'employé."""

import logging

from src.config import COLLECTION_EMPLOYEES, DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY
from src.errors import NotFound
from src.storage.document_store import DocumentStore, execute_with_retry


logger = logging.getLogger(__name__)

PAYSLIPS_FIELD = "payslips"


class EmployeePayslipLinker:
    """
    Ajoute l'identifiant d'un bulletin à la liste `payslips` de l'employé.

    Opération idempotente : un bulletin déjà présent dans la liste n'est
    pas ajouté une seconde fois. Une génération interrompue après
    l'enregistrement du bulletin peut donc relancer la liaison seule.

    L'ajout passe par `array_union` : deux liaisons simultanées pour le
    même employé ne s'écrasent pas.
    """

    def __init__(
        self,
        store: DocumentStore,
        collection: str = COLLECTION_EMPLOYEES,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
    ):
        self.store = store
        self.collection = collection
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    async def link(self, employee_id: str, payslip_id: str) -> bool:
        """
        Lie un bulletin à un employé.

        Returns:
            True si la liste a été mise à jour, False si le bulletin était déjà lié.

        Raises:
            NotFound: Si l'employé n'existe pas.
            PersistenceError: Si le stockage est indisponible.
        """
        employee = await execute_with_retry(
            lambda: self.store.get(self.collection, employee_id),
            f"lecture de l'employé {employee_id}",
            max_retries=self.max_retries,
            retry_delay=self.retry_delay,
        )
        if employee is None:
            raise NotFound(self.collection, employee_id)

        payslip_ids = list(employee.get(PAYSLIPS_FIELD) or [])
        if payslip_id in payslip_ids:
            logger.info("Bulletin %s déjà lié à l'employé %s", payslip_id, employee_id)
            return False

        await execute_with_retry(
            lambda: self.store.array_union(self.collection, employee_id, PAYSLIPS_FIELD, [payslip_id]),
            f"liaison du bulletin {payslip_id} à l'employé {employee_id}",
            max_retries=self.max_retries,
            retry_delay=self.retry_delay,
        )
        logger.info("Bulletin %s lié à l'employé %s", payslip_id, employee_id)
        return True

    async def payslip_ids(self, employee_id: str) -> list[str]:
        """
        Raises:
            NotFound: Si l'employé n'existe pas.
        """
        employee = await execute_with_retry(
            lambda: self.store.get(self.collection, employee_id),
            f"lecture de l'employé {employee_id}",
            max_retries=self.max_retries,
            retry_delay=self.retry_delay,
        )
        if employee is None:
            raise NotFound(self.collection, employee_id)
        return list(employee.get(PAYSLIPS_FIELD) or [])
