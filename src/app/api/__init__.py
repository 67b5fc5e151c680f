"""API router principal."""

from fastapi import APIRouter

from src.app.routes.payslips import router as payslips_router
from src.app.routes.salaire import router as salaire_router

router = APIRouter()

router.include_router(payslips_router, tags=["bulletins"])
router.include_router(salaire_router, tags=["simulation"])
