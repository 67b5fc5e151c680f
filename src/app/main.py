"""Application FastAPI principale."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from src.app.api import router
from src.config import app_settings, configure_logging

configure_logging(app_settings)

app = FastAPI(
    title="Bulletins de Paie",
    description="API de calcul de salaire et de génération des bulletins de paie",
    version="0.1.0",
)
app.add_middleware(
      CORSMiddleware,
      allow_origins=["http://localhost:5173", "http://localhost:5174", "http://localhost:3000"],
      allow_credentials=True,
      allow_methods=["*"],
      allow_headers=["*"],
)

app.include_router(router, prefix="/api", tags=["paie"])


def dev_server():
    """Lance le serveur de développement."""
    import uvicorn
    uvicorn.run("src.app.main:app", host=app_settings.HOST, port=app_settings.PORT, reload=True)


def prod_server():
    """Lance le serveur de production."""
    import uvicorn
    uvicorn.run("src.app.main:app", host=app_settings.HOST, port=app_settings.PORT, workers=4)
