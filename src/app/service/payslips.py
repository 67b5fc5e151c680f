"""Service de paie partagé par les routes."""

from functools import lru_cache

from fastapi import HTTPException

from src.config import payroll_settings
from src.errors import (
    DuplicatePayslip,
    InvalidInput,
    InvalidTransition,
    NotFound,
    PayrollError,
    PersistenceError,
)
from src.services.payslip_generation import PayslipService
from src.storage.document_store import InMemoryDocumentStore


@lru_cache
def get_payslip_service() -> PayslipService:
    """
    Service de paie de l'application.

    Le stockage réel est injecté en surchargeant cette dépendance
    (app.dependency_overrides), le stockage en mémoire sert par défaut.
    """
    return PayslipService(InMemoryDocumentStore(), payroll_settings)


def to_http_error(error: PayrollError) -> HTTPException:
    """Traduit une erreur de paie en réponse HTTP."""
    if isinstance(error, InvalidInput):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, NotFound):
        if error.payslip is not None:
            return HTTPException(status_code=404, detail={"message": str(error), "payslip_id": error.payslip.id})
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, (InvalidTransition, DuplicatePayslip)):
        return HTTPException(status_code=409, detail=str(error))
    if isinstance(error, PersistenceError):
        detail = {"message": str(error)}
        if error.payslip is not None:
            detail["payslip_id"] = error.payslip.id
        return HTTPException(status_code=503, detail=detail)
    return HTTPException(status_code=500, detail=str(error))
