"""Enregistrement et lecture des bulletins de paie."""

import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Awaitable, Callable

from src.config import COLLECTION_PAYSLIPS, DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY
from src.errors import DuplicatePayslip, InvalidInput, InvalidTransition, NotFound
from src.models.payslip import AnnualCumulative, Payslip, PayslipFilter, PayslipStatus
from src.storage.document_store import DocumentStore, execute_with_retry


logger = logging.getLogger(__name__)

# Espace de noms des identifiants dérivés d'une clé d'idempotence
IDEMPOTENCY_NAMESPACE = uuid.UUID("6f1c2a52-8d3e-4b7a-9c41-2f5e0d7b9a13")

PreSaveHook = Callable[["PayslipRepository", Payslip], Awaitable[None]]


def _tri_periode_desc(payslips: list[Payslip]) -> list[Payslip]:
    """Période la plus récente en premier, puis enregistrement le plus récent."""
    epoch = datetime.min.replace(tzinfo=timezone.utc)
    return sorted(
        payslips,
        key=lambda p: (p.year, p.month, p.created_at or epoch),
        reverse=True,
    )


async def reject_duplicate_period(repository: "PayslipRepository", payslip: Payslip) -> None:
    """
    Contrôle optionnel avant enregistrement : un seul bulletin par employé et par période.

    Non activé par défaut, deux générations sur la même période
    produisent deux bulletins distincts.
    """
    existing = await repository.find_by_employee_period(payslip.employee_id, payslip.year, payslip.month)
    if existing:
        raise DuplicatePayslip(payslip.employee_id, payslip.period, existing[0].id)


class PayslipRepository:
    """
    Persistance des bulletins dans la collection `payslips`.

    Un document par bulletin, indexé par l'identifiant attribué à
    l'enregistrement.
    """

    def __init__(
        self,
        store: DocumentStore,
        collection: str = COLLECTION_PAYSLIPS,
        pre_save_hooks: list[PreSaveHook] | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
    ):
        self.store = store
        self.collection = collection
        self.pre_save_hooks = list(pre_save_hooks or [])
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    async def _run(self, operation, description: str):
        return await execute_with_retry(
            operation, description, max_retries=self.max_retries, retry_delay=self.retry_delay
        )

    def _to_payslip(self, document: dict) -> Payslip:
        return Payslip.model_validate(document)

    async def save(self, payslip: Payslip, idempotency_key: str | None = None) -> Payslip:
        """
        Enregistre un nouveau bulletin et lui attribue un identifiant.

        Avec une clé d'idempotence, l'identifiant est dérivé de la clé :
        un enregistrement relancé avec la même clé retourne le bulletin
        déjà stocké au lieu d'en créer un second.

        Raises:
            InvalidInput: Si le bulletin a déjà un identifiant.
            DuplicatePayslip: Si un contrôle avant enregistrement le refuse.
            PersistenceError: Si le stockage est indisponible.
        """
        if payslip.id:
            raise InvalidInput(f"Le bulletin {payslip.id} est déjà enregistré")

        key = idempotency_key or payslip.idempotency_key
        if key:
            payslip_id = uuid.uuid5(IDEMPOTENCY_NAMESPACE, key).hex
            existing = await self.find_by_idempotency_key(key)
            if existing is not None:
                logger.info("Bulletin %s déjà enregistré pour la clé %s", payslip_id, key)
                return existing
        else:
            payslip_id = uuid.uuid4().hex

        for hook in self.pre_save_hooks:
            await hook(self, payslip)

        now = datetime.now(timezone.utc)
        stored = payslip.model_copy(update={
            "id": payslip_id,
            "idempotency_key": key,
            "created_at": now,
            "updated_at": now,
        })
        document = stored.model_dump(mode="json")

        await self._run(
            lambda: self.store.set(self.collection, payslip_id, document),
            f"enregistrement du bulletin {payslip_id}",
        )
        logger.info(
            "Bulletin %s enregistré (employé %s, période %s)",
            payslip_id, stored.employee_id, stored.period,
        )
        return stored

    async def find_by_idempotency_key(self, idempotency_key: str) -> Payslip | None:
        """Bulletin déjà enregistré avec cette clé, None sinon."""
        payslip_id = uuid.uuid5(IDEMPOTENCY_NAMESPACE, idempotency_key).hex
        document = await self._run(
            lambda: self.store.get(self.collection, payslip_id),
            f"lecture du bulletin {payslip_id}",
        )
        return self._to_payslip(document) if document is not None else None

    async def get(self, payslip_id: str) -> Payslip:
        """
        Raises:
            NotFound: Si le bulletin n'existe pas.
        """
        document = await self._run(
            lambda: self.store.get(self.collection, payslip_id),
            f"lecture du bulletin {payslip_id}",
        )
        if document is None:
            raise NotFound(self.collection, payslip_id)
        return self._to_payslip(document)

    async def _query(self, filters: dict, description: str) -> list[Payslip]:
        documents = await self._run(lambda: self.store.query(self.collection, filters), description)
        return _tri_periode_desc([self._to_payslip(d) for d in documents])

    async def find_by_employee(self, employee_id: str) -> list[Payslip]:
        """Bulletins d'un employé, période la plus récente en premier. Liste vide si aucun."""
        return await self._query({"employee_id": employee_id}, f"bulletins de l'employé {employee_id}")

    async def find_by_employee_period(self, employee_id: str, year: int, month: int) -> list[Payslip]:
        return await self._query(
            {"employee_id": employee_id, "year": year, "month": month},
            f"bulletins de l'employé {employee_id} pour {month:02d}/{year}",
        )

    async def find_by_company(self, company_id: str) -> list[Payslip]:
        return await self.find(PayslipFilter(company_id=company_id))

    async def find_by_period(self, year: int, month: int) -> list[Payslip]:
        return await self._query({"year": year, "month": month}, f"bulletins de {month:02d}/{year}")

    async def find(self, filters: PayslipFilter | None = None) -> list[Payslip]:
        """
        Recherche multicritère, période la plus récente en premier.

        Employé, mois, année et statut sont passés au stockage ;
        l'entreprise et la fourchette de net à payer sont filtrées ici.
        Sans critère, retourne tous les bulletins.

        Raises:
            InvalidInput: Si le minimum dépasse le maximum.
        """
        filters = filters or PayslipFilter()
        if (
            filters.min_amount is not None
            and filters.max_amount is not None
            and filters.min_amount > filters.max_amount
        ):
            raise InvalidInput(
                f"Montant minimum ({filters.min_amount}) supérieur au maximum ({filters.max_amount})"
            )

        criteria = {
            "employee_id": filters.employee_id,
            "year": filters.year,
            "month": filters.month,
            "status": filters.status.value if filters.status is not None else None,
        }
        payslips = await self._query(
            {key: value for key, value in criteria.items() if value is not None},
            "recherche de bulletins",
        )
        return [
            p for p in payslips
            if (filters.company_id is None or p.company.company_id == filters.company_id)
            and (filters.min_amount is None or p.net_salary >= filters.min_amount)
            and (filters.max_amount is None or p.net_salary <= filters.max_amount)
        ]

    async def cumulative_to_date(self, employee_id: str, year: int, month: int) -> AnnualCumulative:
        """Cumuls des bulletins de l'employé sur l'année, avant le mois donné."""
        payslips = [
            p for p in await self.find_by_employee(employee_id)
            if p.year == year and p.month < month
        ]
        return AnnualCumulative(
            gross_salary=sum((p.gross_salary for p in payslips), Decimal("0")),
            net_salary=sum((p.net_salary for p in payslips), Decimal("0")),
            taxable_income=sum((p.taxable_income for p in payslips), Decimal("0")),
        )

    async def update_status(self, payslip_id: str, new_status: PayslipStatus | str) -> Payslip:
        """
        Fait avancer le statut d'un bulletin.

        Généré → Envoyé → Validé, une ou plusieurs étapes à la fois.
        Redemander le statut courant ne modifie rien.

        Raises:
            InvalidInput: Statut inconnu.
            InvalidTransition: Retour à un statut antérieur.
            NotFound: Bulletin inexistant.
        """
        try:
            target = PayslipStatus(new_status)
        except ValueError as err:
            raise InvalidInput(f"Statut inconnu : '{new_status}'") from err

        payslip = await self.get(payslip_id)
        if target == payslip.status:
            return payslip
        if target.rank < payslip.status.rank:
            raise InvalidTransition(payslip.status.value, target.value)

        now = datetime.now(timezone.utc)
        await self._run(
            lambda: self.store.update(
                self.collection, payslip_id, {"status": target.value, "updated_at": now.isoformat()}
            ),
            f"mise à jour du statut du bulletin {payslip_id}",
        )
        logger.info("Bulletin %s : statut %s → %s", payslip_id, payslip.status.value, target.value)
        return payslip.model_copy(update={"status": target, "updated_at": now})
