"""
Service de génération des bulletins de paie.

Enchaîne les étapes d'une génération :
1. Calcul du salaire (SalaryCalculator)
2. Lecture des fiches employé / entreprise et des soldes de congés
3. Calcul des nouveaux soldes (LeaveBalanceTracker)
4. Assemblage du bulletin (PayslipBuilder)
5. Enregistrement (PayslipRepository)
6. Liaison à l'employé (EmployeePayslipLinker)
7. Report des soldes de congés sur la fiche employé

En cas d'échec après l'enregistrement, seule l'étape en échec est à
relancer : le bulletin enregistré est joint à l'erreur.

Une génération relancée avec sa clé d'idempotence ne refait que la
liaison : les soldes de congés ne sont reportés qu'à la génération
initiale, pour ne pas écraser ceux d'un bulletin plus récent.
"""

import logging
from datetime import date
from decimal import Decimal

from src.config import PayrollSettings, payroll_settings
from src.errors import IncompleteInput, InvalidInput, NotFound, PersistenceError
from src.models.payslip import LinkResult, PayPeriod, Payslip, PayslipFilter, PayslipStatus
from src.services.archive import DocumentArchiver, PayslipRenderer, StoreDocumentArchiver, payslip_filename
from src.services.leave import LeaveBalanceTracker
from src.services.payslip_builder import PayslipBuilder
from src.services.salary import SalaryCalculator
from src.storage.directory import EmployeeDirectory
from src.storage.document_store import DocumentStore
from src.storage.employee_linker import EmployeePayslipLinker
from src.storage.payslip_repository import PayslipRepository, reject_duplicate_period


logger = logging.getLogger(__name__)


def _require(value: str | None, message: str) -> str:
    if value is None or not str(value).strip():
        raise IncompleteInput(message)
    return str(value).strip()


class PayslipService:
    """Point d'entrée de la génération et du suivi des bulletins."""

    def __init__(
        self,
        store: DocumentStore,
        settings: PayrollSettings | None = None,
        unique_per_period: bool = False,
    ):
        settings = settings or payroll_settings
        retry = {"max_retries": settings.STORE_MAX_RETRIES, "retry_delay": settings.STORE_RETRY_DELAY}

        self.calculator = SalaryCalculator(settings.to_rates())
        self.tracker = LeaveBalanceTracker(settings.CONGES_ACCRUAL, settings.RTT_ACCRUAL)
        self.builder = PayslipBuilder()
        self.repository = PayslipRepository(
            store,
            collection=settings.PAYSLIPS_COLLECTION,
            pre_save_hooks=[reject_duplicate_period] if unique_per_period else None,
            **retry,
        )
        self.linker = EmployeePayslipLinker(store, collection=settings.EMPLOYEES_COLLECTION, **retry)
        self.directory = EmployeeDirectory(
            store,
            employees_collection=settings.EMPLOYEES_COLLECTION,
            companies_collection=settings.COMPANIES_COLLECTION,
            **retry,
        )
        self.archiver = StoreDocumentArchiver(
            store,
            employees_collection=settings.EMPLOYEES_COLLECTION,
            documents_collection=settings.DOCUMENTS_COLLECTION,
            **retry,
        )

    async def _after_save(self, payslip: Payslip, step, description: str) -> None:
        """Exécute une étape postérieure à l'enregistrement ; l'erreur porte le bulletin."""
        try:
            await step()
        except NotFound as exc:
            logger.error(
                "Bulletin %s enregistré mais %s impossible : %s/%s introuvable",
                payslip.id, description, exc.collection, exc.document_id,
            )
            raise NotFound(exc.collection, exc.document_id, payslip=payslip) from exc
        except PersistenceError as exc:
            logger.error(
                "Bulletin %s enregistré mais %s en échec pour l'employé %s : %s",
                payslip.id, description, payslip.employee_id, exc,
            )
            raise PersistenceError(
                f"Bulletin {payslip.id} enregistré, {description} à relancer : {exc}",
                payslip=payslip,
            ) from exc

    async def _link(self, payslip: Payslip) -> None:
        await self._after_save(
            payslip,
            lambda: self.linker.link(payslip.employee_id, payslip.id),
            f"liaison à l'employé {payslip.employee_id}",
        )

    async def generate_payslip(
        self,
        employee_id: str,
        company_id: str,
        period: str,
        base_salary: Decimal,
        overtime_hours: Decimal = Decimal("0"),
        overtime_rate: Decimal | None = None,
        conges_taken: Decimal = Decimal("0"),
        rtt_taken: Decimal = Decimal("0"),
        payment_date: date | None = None,
        idempotency_key: str | None = None,
    ) -> Payslip:
        """
        Génère, enregistre et lie un bulletin de paie.

        Args:
            employee_id: Identifiant de l'employé.
            company_id: Identifiant de l'entreprise.
            period: Libellé de la période ("Juin 2025").
            base_salary: Salaire de base mensuel brut.
            overtime_hours: Heures supplémentaires.
            overtime_rate: Majoration (%), défaut configuré si None.
            conges_taken: Jours de congés payés pris sur la période.
            rtt_taken: Jours de RTT pris sur la période.
            payment_date: Date de paiement.
            idempotency_key: Clé de relance : une génération relancée avec la
                même clé retourne le bulletin déjà enregistré.

        Returns:
            Payslip enregistré, avec son identifiant.

        Raises:
            IncompleteInput: Identifiant ou période manquant.
            InvalidInput: Montant ou solde de congés invalide.
            NotFound: Employé ou entreprise inexistant. Si l'employé disparaît
                après l'enregistrement, le bulletin est dans `exc.payslip`.
            DuplicatePayslip: Bulletin déjà généré sur la période (si unique_per_period).
            PersistenceError: Stockage indisponible. Si le bulletin a été
                enregistré, il est disponible dans `exc.payslip`.
        """
        employee_id = _require(employee_id, "L'identifiant de l'employé est obligatoire")
        company_id = _require(company_id, "L'identifiant de l'entreprise est obligatoire")
        label = _require(period, "La période est obligatoire")
        try:
            pay_period = PayPeriod.from_label(label)
        except ValueError as err:
            raise InvalidInput(str(err)) from err

        if idempotency_key:
            existing = await self.repository.find_by_idempotency_key(idempotency_key)
            if existing is not None:
                logger.info("Génération relancée avec la clé %s : bulletin %s existant", idempotency_key, existing.id)
                await self._link(existing)
                return existing

        breakdown = self.calculator.compute(base_salary, overtime_hours, overtime_rate)

        employee = await self.directory.employee_snapshot(employee_id)
        company = await self.directory.company_snapshot(company_id)

        prior_conges, prior_rtt = await self.directory.leave_balances(employee_id)
        leave = self.tracker.compute_all(prior_conges, prior_rtt, conges_taken, rtt_taken)

        cumul = await self.repository.cumulative_to_date(employee_id, pay_period.year, pay_period.month)

        payslip = self.builder.build(
            employee, company, pay_period, breakdown, leave, cumul, payment_date=payment_date
        )
        saved = await self.repository.save(payslip, idempotency_key=idempotency_key)
        await self._link(saved)
        await self._after_save(
            saved,
            lambda: self.directory.save_leave_balances(saved.employee_id, saved.leave),
            "report des soldes de congés",
        )

        logger.info(
            "Bulletin %s généré pour %s (%s) : brut %s, net %s",
            saved.id, saved.employee_name, saved.period, saved.gross_salary, saved.net_salary,
        )
        return saved

    async def relink(self, employee_id: str, payslip_id: str) -> LinkResult:
        """Relance la liaison seule après un échec partiel."""
        payslip = await self.repository.get(payslip_id)
        if payslip.employee_id != employee_id:
            raise InvalidInput(f"Le bulletin {payslip_id} n'appartient pas à l'employé {employee_id}")
        linked = await self.linker.link(employee_id, payslip_id)
        return LinkResult(employee_id=employee_id, payslip_id=payslip_id, linked=linked)

    async def get(self, payslip_id: str) -> Payslip:
        return await self.repository.get(payslip_id)

    async def list_for_employee(self, employee_id: str) -> list[Payslip]:
        return await self.repository.find_by_employee(employee_id)

    async def search(self, filters: PayslipFilter) -> list[Payslip]:
        return await self.repository.find(filters)

    async def update_status(self, payslip_id: str, status: PayslipStatus | str) -> Payslip:
        return await self.repository.update_status(payslip_id, status)

    async def archive(
        self,
        payslip_id: str,
        renderer: PayslipRenderer,
        archiver: DocumentArchiver | None = None,
    ) -> dict:
        """Fait rendre le bulletin par le renderer externe puis l'archive chez l'employé."""
        payslip = await self.repository.get(payslip_id)
        content = renderer.render(payslip)
        return await (archiver or self.archiver).archive(payslip, content, payslip_filename(payslip))
