"""Uvicorn runner."""

import logging
import uvicorn

from log import get_logger
from models.config import ServiceConfiguration, TLSConfiguration
from utils import checks

logger = get_logger(__name__)

APP_PATH = "app.main:app"


def read_tls_key_password(tls_config: TLSConfiguration) -> str:
    """Return password protecting the TLS key, empty string when not set."""
    password = checks.get_attribute_from_file(dict(tls_config), "tls_key_password")
    return password or ""


def start_uvicorn(
    configuration: ServiceConfiguration, log_level: int = logging.INFO
) -> None:
    """Start Uvicorn-based REST API service.

    Each worker imports the application separately and loads configuration
    from path stored in LIFE_COACH_CONFIG_PATH environment variable.
    """
    logger.info(
        "Starting Uvicorn on %s:%d with %d worker(s)",
        configuration.host,
        configuration.port,
        configuration.workers,
    )

    # please note:
    # TLS fields can be None, which means we will pass those values as None to uvicorn.run
    uvicorn.run(
        APP_PATH,
        host=configuration.host,
        port=configuration.port,
        workers=configuration.workers,
        log_level=log_level,
        ssl_keyfile=configuration.tls_config.tls_key_path,
        ssl_certfile=configuration.tls_config.tls_certificate_path,
        ssl_keyfile_password=read_tls_key_password(configuration.tls_config),
        use_colors=configuration.color_log,
        access_log=configuration.access_log,
    )
