"""
Configuration des tests.

Fixtures communes : stockage en mémoire pré-rempli avec un employé et
une entreprise, services de paie sans délai de relance.
"""

import asyncio
from datetime import date
from decimal import Decimal

import pytest

from src.config import PayrollSettings
from src.models.payslip import CompanySnapshot, EmployeeSnapshot, PayPeriod
from src.services.leave import LeaveBalanceTracker
from src.services.payslip_builder import PayslipBuilder
from src.services.payslip_generation import PayslipService
from src.services.salary import SalaryCalculator
from src.storage.document_store import InMemoryDocumentStore
from src.storage.employee_linker import EmployeePayslipLinker
from src.storage.payslip_repository import PayslipRepository


EMPLOYEE_ID = "emp-1"
COMPANY_ID = "comp-1"


def seed_data() -> dict:
    return {
        "employees": {
            EMPLOYEE_ID: {
                "firstName": "Marie",
                "lastName": "Dupont",
                "role": "Comptable",
                "socialSecurityNumber": "2 85 06 75 123 456 78",
                "startDate": "2021-03-01",
                "conges": {"acquired": "25", "taken": "20", "balance": "5"},
                "rtt": {"acquired": "0", "taken": "0", "balance": "0"},
                "payslips": [],
            },
        },
        "companies": {
            COMPANY_ID: {
                "name": "Storm Group",
                "address": {"street": "123 Business Street", "postalCode": "75000", "city": "Paris"},
                "siret": "123 456 789 00012",
            },
        },
    }


class FlakyDocumentStore(InMemoryDocumentStore):
    """Stockage qui échoue sur les N premiers appels des méthodes indiquées."""

    def __init__(self, data=None, failures: dict[str, int] | None = None, error: type[Exception] = ConnectionError):
        super().__init__(data)
        self.failures = dict(failures or {})
        self.error = error
        self.calls: dict[str, int] = {}

    def _maybe_fail(self, method: str) -> None:
        self.calls[method] = self.calls.get(method, 0) + 1
        if self.failures.get(method, 0) > 0:
            self.failures[method] -= 1
            raise self.error(f"{method} indisponible")

    async def get(self, collection, document_id):
        self._maybe_fail("get")
        return await super().get(collection, document_id)

    async def set(self, collection, document_id, value):
        self._maybe_fail("set")
        return await super().set(collection, document_id, value)

    async def update(self, collection, document_id, partial):
        self._maybe_fail("update")
        return await super().update(collection, document_id, partial)

    async def array_union(self, collection, document_id, field, values):
        self._maybe_fail("array_union")
        return await super().array_union(collection, document_id, field, values)

    async def query(self, collection, filters=None):
        self._maybe_fail("query")
        return await super().query(collection, filters)


class YieldingDocumentStore(InMemoryDocumentStore):
    """Stockage qui rend la main à la boucle avant chaque opération."""

    async def get(self, collection, document_id):
        await asyncio.sleep(0)
        return await super().get(collection, document_id)

    async def set(self, collection, document_id, value):
        await asyncio.sleep(0)
        return await super().set(collection, document_id, value)

    async def update(self, collection, document_id, partial):
        await asyncio.sleep(0)
        return await super().update(collection, document_id, partial)

    async def array_union(self, collection, document_id, field, values):
        await asyncio.sleep(0)
        return await super().array_union(collection, document_id, field, values)

    async def query(self, collection, filters=None):
        await asyncio.sleep(0)
        return await super().query(collection, filters)


class EmployeeRemovedOnSaveStore(InMemoryDocumentStore):
    """Supprime la fiche employé dès qu'un bulletin est enregistré."""

    async def set(self, collection, document_id, value):
        await super().set(collection, document_id, value)
        if collection == "payslips":
            async with self._lock:
                self._data["employees"].pop(EMPLOYEE_ID, None)


@pytest.fixture
def settings() -> PayrollSettings:
    return PayrollSettings(STORE_RETRY_DELAY=0.0)


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore(seed_data())


@pytest.fixture
def service(store, settings) -> PayslipService:
    return PayslipService(store, settings)


@pytest.fixture
def repository(store) -> PayslipRepository:
    return PayslipRepository(store, retry_delay=0.0)


@pytest.fixture
def linker(store) -> EmployeePayslipLinker:
    return EmployeePayslipLinker(store, retry_delay=0.0)


@pytest.fixture
def calculator() -> SalaryCalculator:
    return SalaryCalculator()


@pytest.fixture
def employee() -> EmployeeSnapshot:
    return EmployeeSnapshot(
        employee_id=EMPLOYEE_ID,
        first_name="Marie",
        last_name="Dupont",
        role="Comptable",
        social_security_number="2 85 06 75 123 456 78",
        start_date=date(2021, 3, 1),
    )


@pytest.fixture
def company() -> CompanySnapshot:
    return CompanySnapshot(
        company_id=COMPANY_ID,
        name="Storm Group",
        address="123 Business Street, 75000 Paris",
        siret="123 456 789 00012",
    )


@pytest.fixture
def make_payslip(calculator, employee, company):
    """Construit un bulletin non enregistré pour une période donnée."""
    builder = PayslipBuilder()
    tracker = LeaveBalanceTracker()

    def _make(period: str = "Juin 2025", base_salary: str = "2500", overtime_hours: str = "0"):
        breakdown = calculator.compute(Decimal(base_salary), Decimal(overtime_hours))
        leave = tracker.compute_all(Decimal("5"), Decimal("0"))
        return builder.build(employee, company, PayPeriod.from_label(period), breakdown, leave)

    return _make
