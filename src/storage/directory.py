"""Lecture des fiches employé et entreprise."""

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from src.config import COLLECTION_COMPANIES, COLLECTION_EMPLOYEES, DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY
from src.errors import NotFound
from src.models.payslip import CompanySnapshot, EmployeeSnapshot, LeaveBalances
from src.storage.document_store import DocumentStore, execute_with_retry


logger = logging.getLogger(__name__)


def _parse_date(value: Any) -> date | None:
    if not value:
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def _parse_decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return Decimal("0")


def format_address(address: Any) -> str | None:
    """Adresse sur une ligne : "12 rue de la Paix, 75002 Paris"."""
    if not address:
        return None
    if isinstance(address, str):
        return address.strip() or None
    street = (address.get("street") or "").strip()
    ville = " ".join(
        part for part in ((address.get("postalCode") or "").strip(), (address.get("city") or "").strip()) if part
    )
    return ", ".join(part for part in (street, ville) if part) or None


class EmployeeDirectory:
    """Accès aux fiches `employees` et `companies` du stockage."""

    def __init__(
        self,
        store: DocumentStore,
        employees_collection: str = COLLECTION_EMPLOYEES,
        companies_collection: str = COLLECTION_COMPANIES,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
    ):
        self.store = store
        self.employees_collection = employees_collection
        self.companies_collection = companies_collection
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    async def _get(self, collection: str, document_id: str) -> dict[str, Any]:
        document = await execute_with_retry(
            lambda: self.store.get(collection, document_id),
            f"lecture de {collection}/{document_id}",
            max_retries=self.max_retries,
            retry_delay=self.retry_delay,
        )
        if document is None:
            raise NotFound(collection, document_id)
        return document

    async def employee_snapshot(self, employee_id: str) -> EmployeeSnapshot:
        """
        Raises:
            NotFound: Si l'employé n'existe pas.
        """
        employee = await self._get(self.employees_collection, employee_id)
        return EmployeeSnapshot(
            employee_id=employee_id,
            first_name=employee.get("firstName") or "",
            last_name=employee.get("lastName") or "",
            role=employee.get("role") or employee.get("position"),
            social_security_number=employee.get("socialSecurityNumber"),
            start_date=_parse_date(employee.get("startDate") or employee.get("hireDate")),
        )

    async def company_snapshot(self, company_id: str) -> CompanySnapshot:
        """
        Raises:
            NotFound: Si l'entreprise n'existe pas.
        """
        company = await self._get(self.companies_collection, company_id)
        return CompanySnapshot(
            company_id=company_id,
            name=company.get("name") or "",
            address=format_address(company.get("address")),
            siret=company.get("siret"),
        )

    async def leave_balances(self, employee_id: str) -> tuple[Decimal, Decimal]:
        """Soldes courants (congés payés, RTT) enregistrés sur la fiche, 0 si absents."""
        employee = await self._get(self.employees_collection, employee_id)
        conges = employee.get("conges") or {}
        rtt = employee.get("rtt") or {}
        return _parse_decimal(conges.get("balance")), _parse_decimal(rtt.get("balance"))

    async def save_leave_balances(self, employee_id: str, leave: LeaveBalances) -> None:
        """Reporte les soldes de fin de période sur la fiche de l'employé."""
        await execute_with_retry(
            lambda: self.store.update(self.employees_collection, employee_id, {
                "conges": {
                    "acquired": str(leave.conges.acquired),
                    "taken": str(leave.conges.taken),
                    "balance": str(leave.conges.balance),
                },
                "rtt": {
                    "acquired": str(leave.rtt.acquired),
                    "taken": str(leave.rtt.taken),
                    "balance": str(leave.rtt.balance),
                },
            }),
            f"mise à jour des congés de l'employé {employee_id}",
            max_retries=self.max_retries,
            retry_delay=self.retry_delay,
        )
        logger.info(
            "Congés de l'employé %s mis à jour : CP %s j, RTT %s j",
            employee_id, leave.conges.balance, leave.rtt.balance,
        )
