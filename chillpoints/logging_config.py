import logging
import logging.config


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# chatty transport loggers, capped regardless of the app level
QUIET_LOGGERS = ("urllib3", "requests", "httpx")


def build_logging_config(level: str = "INFO") -> dict:
    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {"format": LOG_FORMAT},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "plain",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "chillpoints": {"level": level, "handlers": ["console"], "propagate": False},
            **{name: {"level": "WARNING"} for name in QUIET_LOGGERS},
        },
        "root": {"level": "WARNING", "handlers": ["console"]},
    }


def setup_logging(level: str = "INFO"):
    logging.config.dictConfig(build_logging_config(level))
    logging.getLogger("chillpoints").debug("logging configured", extra={"level": level})
