from __future__ import annotations

import logging


def configure_app_logging(level: str = "INFO") -> None:
    """
    Set the level of the ``erp_nav`` package logger.

    Notes:
    - Handlers come from uvicorn (or the host application); only levels are set here.
    - Set `NAV_LOG_LEVEL=DEBUG` to see per-item visibility and route detection decisions.
    """

    normalized = level.upper()
    logging.getLogger("erp_nav").setLevel(normalized)
    logging.getLogger("erp_nav").propagate = True
