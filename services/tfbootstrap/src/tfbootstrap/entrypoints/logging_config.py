"""
Logging configuration for the CLI.

Everything goes to stderr so stdout carries only the child's echoed output
(or a JSON result document).
"""

import logging
import logging.config
from typing import Any, Dict

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": LOG_FORMAT,
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stderr",
            }
        },
        "loggers": {
            "tfbootstrap": {
                "handlers": ["default"],
                "level": level,
                "propagate": False,
            },
        },
        "root": {
            "level": "WARNING",
            "handlers": ["default"],
        },
    }


def setup_logging(verbose: bool = False) -> None:
    logging.config.dictConfig(get_logging_config("DEBUG" if verbose else "INFO"))
