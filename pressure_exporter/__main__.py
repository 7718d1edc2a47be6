"""
Entry point for running the exporter.

Usage:
    python -m pressure_exporter
    PRESSURE_EXPORTER_PROCFS_PATH=/host/proc python -m pressure_exporter
"""
import logging

import uvicorn

from .api import create_app
from .registry import default_registry
from .settings import get_settings

logger = logging.getLogger(__name__)


def main():
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    collectors = default_registry()
    logger.info(f"Available collectors: {', '.join(collectors.names())}")
    app = create_app(settings, collectors)

    logger.info(f"Listening on {settings.listen_host}:{settings.listen_port}, procfs at {settings.procfs_path}")
    uvicorn.run(app, host=settings.listen_host, port=settings.listen_port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
