import uvicorn
import os
import logging
from dotenv import load_dotenv

# Carica variabili ambiente
load_dotenv()

# Logging colorato prima degli import che usano logging
from core.logger import setup_colored_logging
setup_colored_logging("ingest")

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    port = int(os.getenv("PORT", 8001))
    host = os.getenv("HOST", "0.0.0.0")

    if not os.getenv("DATABASE_URL"):
        logger.warning("DATABASE_URL not set - uploads will fail at insert time")

    workers = int(os.getenv("UVICORN_WORKERS", "2"))

    logger.info(f"Starting ops-dashboard-ingest on {host}:{port} with {workers} workers")

    try:
        uvicorn.run(
            "api.main:app",
            host=host,
            port=port,
            workers=workers,
            reload=False,
            log_level="info",
            access_log=True,
            use_colors=False  # colori gestiti da colorlog
        )
    except Exception as e:
        logger.error(f"Failed to start server: {e}")
        raise
