"""
Archivage des bulletins dans les documents de l'employé.

Le rendu (PDF) est externe : un PayslipRenderer reçoit le bulletin
finalisé et produit les octets du document. Ce module ne fait que les
ranger avec le dossier de l'employé.
"""

import base64
import logging
import re
import unicodedata
from datetime import datetime, timezone
from typing import Any, Protocol

from src.config import COLLECTION_DOCUMENTS, COLLECTION_EMPLOYEES, DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY
from src.errors import NotFound
from src.models.payslip import Payslip
from src.storage.document_store import DocumentStore, execute_with_retry


logger = logging.getLogger(__name__)


class PayslipRenderer(Protocol):
    """Produit le document (PDF ou autre) d'un bulletin finalisé."""

    def render(self, payslip: Payslip) -> bytes:
        ...


class DocumentArchiver(Protocol):
    """Range le document rendu d'un bulletin dans le dossier de l'employé."""

    async def archive(self, payslip: Payslip, content: bytes, filename: str) -> dict[str, Any]:
        ...


def payslip_filename(payslip: Payslip) -> str:
    """bulletin_paie_<Nom>_<Période>.pdf, sans accents ni espaces."""
    def _slug(value: str) -> str:
        ascii_value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
        return re.sub(r"[^A-Za-z0-9]+", "_", ascii_value).strip("_")

    return f"bulletin_paie_{_slug(payslip.employee_name) or payslip.employee_id}_{_slug(payslip.period)}.pdf"


class StoreDocumentArchiver:
    """
    Archiveur reposant sur le stockage de documents.

    Le contenu est enregistré dans `hr_documents` ; une entrée est ajoutée
    à la liste `documents` de l'employé, une seule fois par bulletin.
    """

    def __init__(
        self,
        store: DocumentStore,
        employees_collection: str = COLLECTION_EMPLOYEES,
        documents_collection: str = COLLECTION_DOCUMENTS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
    ):
        self.store = store
        self.employees_collection = employees_collection
        self.documents_collection = documents_collection
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    async def _run(self, operation, description: str):
        return await execute_with_retry(
            operation, description, max_retries=self.max_retries, retry_delay=self.retry_delay
        )

    async def archive(self, payslip: Payslip, content: bytes, filename: str) -> dict[str, Any]:
        """
        Raises:
            ValueError: Si le bulletin n'a pas encore été enregistré.
            NotFound: Si l'employé n'existe pas.
            PersistenceError: Si le stockage est indisponible.
        """
        if not payslip.id:
            raise ValueError("Le bulletin doit être enregistré avant d'être archivé")

        document_id = f"payslip_{payslip.id}"
        employee = await self._run(
            lambda: self.store.get(self.employees_collection, payslip.employee_id),
            f"lecture de l'employé {payslip.employee_id}",
        )
        if employee is None:
            raise NotFound(self.employees_collection, payslip.employee_id)

        for entry in employee.get("documents") or []:
            if entry.get("id") == document_id:
                logger.info("Bulletin %s déjà archivé pour l'employé %s", payslip.id, payslip.employee_id)
                return entry

        entry = {
            "id": document_id,
            "name": filename,
            "type": "payslip",
            "date": datetime.now(timezone.utc).isoformat(),
            "size": len(content),
            "payslipId": payslip.id,
            "employeeId": payslip.employee_id,
        }
        await self._run(
            lambda: self.store.set(self.documents_collection, document_id, {
                **entry,
                "content": base64.b64encode(content).decode("ascii"),
            }),
            f"enregistrement du document {document_id}",
        )
        await self._run(
            lambda: self.store.array_union(self.employees_collection, payslip.employee_id, "documents", [entry]),
            f"ajout du document {document_id} à l'employé {payslip.employee_id}",
        )
        logger.info("Bulletin %s archivé sous %s (%d octets)", payslip.id, filename, len(content))
        return entry
