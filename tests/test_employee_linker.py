"""
Tests de la liaison bulletin / employé.
"""

import asyncio

import pytest

from src.errors import NotFound, PersistenceError
from src.storage.employee_linker import EmployeePayslipLinker

from tests.conftest import FlakyDocumentStore, YieldingDocumentStore, seed_data


class TestLink:

    @pytest.mark.asyncio
    async def test_ajoute_le_bulletin(self, linker, store):
        linked = await linker.link("emp-1", "p-1")

        assert linked is True
        assert (await store.get("employees", "emp-1"))["payslips"] == ["p-1"]

    @pytest.mark.asyncio
    async def test_idempotent(self, linker, store):
        first = await linker.link("emp-1", "p-1")
        second = await linker.link("emp-1", "p-1")

        assert (first, second) == (True, False)
        assert (await store.get("employees", "emp-1"))["payslips"] == ["p-1"]

    @pytest.mark.asyncio
    async def test_conserve_l_ordre(self, linker):
        for payslip_id in ["p-1", "p-2", "p-1", "p-3", "p-2"]:
            await linker.link("emp-1", payslip_id)

        assert await linker.payslip_ids("emp-1") == ["p-1", "p-2", "p-3"]

    @pytest.mark.asyncio
    async def test_liste_absente(self, store):
        await store.set("employees", "emp-2", {"firstName": "Paul"})
        linker = EmployeePayslipLinker(store, retry_delay=0.0)

        assert await linker.link("emp-2", "p-9") is True
        assert await linker.payslip_ids("emp-2") == ["p-9"]

    @pytest.mark.asyncio
    async def test_employe_inconnu(self, linker):
        with pytest.raises(NotFound) as exc_info:
            await linker.link("absent", "p-1")

        assert exc_info.value.document_id == "absent"
        assert not isinstance(exc_info.value, PersistenceError)

    @pytest.mark.asyncio
    async def test_stockage_indisponible(self):
        store = FlakyDocumentStore(seed_data(), failures={"array_union": 5})
        linker = EmployeePayslipLinker(store, max_retries=2, retry_delay=0.0)

        with pytest.raises(PersistenceError):
            await linker.link("emp-1", "p-1")
        assert (await store.get("employees", "emp-1"))["payslips"] == []

    @pytest.mark.asyncio
    async def test_relance_apres_panne(self):
        store = FlakyDocumentStore(seed_data(), failures={"get": 1})
        linker = EmployeePayslipLinker(store, retry_delay=0.0)

        assert await linker.link("emp-1", "p-1") is True

    @pytest.mark.asyncio
    async def test_liaisons_simultanees(self):
        store = YieldingDocumentStore(seed_data())
        linker = EmployeePayslipLinker(store, retry_delay=0.0)

        results = await asyncio.gather(
            linker.link("emp-1", "p-1"),
            linker.link("emp-1", "p-2"),
            linker.link("emp-1", "p-3"),
        )

        assert results == [True, True, True]
        assert sorted(await linker.payslip_ids("emp-1")) == ["p-1", "p-2", "p-3"]
