"""
Accès générique au stockage de documents.

Le stockage est un collaborateur externe (base documentaire type
Firestore). Le module de paie n'utilise que cinq primitives :
lecture, écriture, mise à jour partielle, ajout atomique à une liste
et requête par égalité.
"""

import asyncio
import copy
import logging
from typing import Any, Awaitable, Callable, Protocol, TypeVar

from src.config import DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY
from src.errors import NotFound, PayrollError, PersistenceError


logger = logging.getLogger(__name__)

T = TypeVar("T")

# Erreurs considérées comme transitoires (réseau, stockage indisponible)
TRANSIENT_ERRORS = (ConnectionError, TimeoutError, OSError)


class DocumentStore(Protocol):
    """Primitives attendues d'une base documentaire."""

    async def get(self, collection: str, document_id: str) -> dict[str, Any] | None:
        ...

    async def set(self, collection: str, document_id: str, value: dict[str, Any]) -> None:
        ...

    async def update(self, collection: str, document_id: str, partial: dict[str, Any]) -> None:
        ...

    async def array_union(self, collection: str, document_id: str, field: str, values: list[Any]) -> None:
        """Ajoute à la liste `field` les valeurs absentes, en une seule écriture atomique."""
        ...

    async def query(self, collection: str, filters: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        ...


class InMemoryDocumentStore:
    """
    Stockage en mémoire.

    Les documents sont copiés en entrée et en sortie : un appelant ne
    peut pas modifier un document stocké sans passer par `set`/`update`.
    Chaque document retourné porte son identifiant dans la clé `id`.
    """

    def __init__(self, data: dict[str, dict[str, dict[str, Any]]] | None = None):
        self._data: dict[str, dict[str, dict[str, Any]]] = copy.deepcopy(data) if data else {}
        self._lock = asyncio.Lock()

    async def get(self, collection: str, document_id: str) -> dict[str, Any] | None:
        async with self._lock:
            document = self._data.get(collection, {}).get(document_id)
            if document is None:
                return None
            return {**copy.deepcopy(document), "id": document_id}

    async def set(self, collection: str, document_id: str, value: dict[str, Any]) -> None:
        async with self._lock:
            stored = copy.deepcopy(value)
            stored.pop("id", None)
            self._data.setdefault(collection, {})[document_id] = stored

    async def update(self, collection: str, document_id: str, partial: dict[str, Any]) -> None:
        async with self._lock:
            document = self._data.get(collection, {}).get(document_id)
            if document is None:
                raise NotFound(collection, document_id)
            document.update(copy.deepcopy(partial))
            document.pop("id", None)

    async def array_union(self, collection: str, document_id: str, field: str, values: list[Any]) -> None:
        async with self._lock:
            document = self._data.get(collection, {}).get(document_id)
            if document is None:
                raise NotFound(collection, document_id)
            current = list(document.get(field) or [])
            for value in values:
                if value not in current:
                    current.append(copy.deepcopy(value))
            document[field] = current

    async def query(self, collection: str, filters: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        filters = filters or {}
        async with self._lock:
            return [
                {**copy.deepcopy(document), "id": document_id}
                for document_id, document in self._data.get(collection, {}).items()
                if all(document.get(key) == value for key, value in filters.items())
            ]


async def execute_with_retry(
    operation: Callable[[], Awaitable[T]],
    description: str,
    max_retries: int = DEFAULT_MAX_RETRIES,
    retry_delay: float = DEFAULT_RETRY_DELAY,
) -> T:
    """
    Exécute une opération de stockage en relançant les erreurs transitoires.

    Le délai double à chaque tentative. Les erreurs métier (PayrollError)
    sont propagées telles quelles, sans nouvelle tentative.

    Raises:
        PersistenceError: Si le stockage reste indisponible ou si l'écriture échoue.
    """
    attempts = max(1, max_retries)
    for attempt in range(attempts):
        try:
            return await operation()
        except PayrollError:
            raise
        except TRANSIENT_ERRORS as exc:
            if attempt < attempts - 1:
                delay = retry_delay * (2 ** attempt)
                logger.warning(
                    "Stockage indisponible pendant '%s' (tentative %d/%d), nouvel essai dans %.2fs : %s",
                    description, attempt + 1, attempts, delay, exc,
                )
                await asyncio.sleep(delay)
                continue
            logger.error("Échec définitif de '%s' après %d tentatives : %s", description, attempts, exc)
            raise PersistenceError(f"Stockage indisponible pendant '{description}' : {exc}") from exc
        except Exception as exc:
            logger.error("Erreur de stockage pendant '%s' : %s", description, exc)
            raise PersistenceError(f"Erreur de stockage pendant '{description}' : {exc}") from exc
    raise PersistenceError(f"Aucune tentative exécutée pour '{description}'")
