"""
Logging configuration for the session store and its CLI.
"""

import logging.config
from typing import Any, Dict


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Get a dictConfig for the ``Session_Store`` loggers."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stderr"
            }
        },
        "loggers": {
            "Session_Store": {
                "level": level
            }
        },
        "root": {
            "level": "WARNING",
            "handlers": ["default"]
        }
    }


def configure_logging(level: str = "INFO") -> None:
    logging.config.dictConfig(get_logging_config(level.upper()))
