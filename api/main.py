"""
Main FastAPI application per ops-dashboard-ingest.

Espone gli endpoint di upload report e l'health check.
"""
import logging
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import get_config, validate_config
from core.database import check_connection, create_tables
from core.logger import setup_colored_logging
from api.routers import uploads

# Configurazione logging colorato
setup_colored_logging("ingest")
logger = logging.getLogger(__name__)

config = get_config()

app = FastAPI(title="Ops Dashboard Ingest", version=config.service_version)

# CORS per le pagine del dashboard
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(uploads.router, prefix="")


@app.on_event("startup")
async def startup_event():
    """Valida configurazione e crea tabelle al startup"""
    try:
        validate_config()
        await create_tables()
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Error during startup: {e}", exc_info=True)


@app.get("/health")
async def health_check():
    """Health check del servizio"""
    return {
        "status": "healthy",
        "service": config.service_name,
        "version": config.service_version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": await check_connection(),
        "endpoints": {
            "upload_inventory": "/upload-inventory",
            "upload_sales": "/upload-sales"
        }
    }
