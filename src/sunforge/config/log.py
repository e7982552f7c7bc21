import logging
import logging.config
import os
from importlib.resources import as_file, files
from typing import Dict, List

import yaml
from uvicorn.logging import ColourizedFormatter

from sunforge.config.settings import Settings, settings

ENV_PREFIX: str = "SUNFORGE_"
LOG_LEVEL_SUFFIX: str = "_LOG_LEVEL"


def setup_loggers() -> None:
    """Configure the named loggers from logging.conf and attach the handlers.

    Levels are applied in increasing order of precedence: logging.conf, the
    settings and finally any ``<NAME>_LOG_LEVEL`` environment variable, with or
    without the ``SUNFORGE_`` prefix.
    """
    log_config: dict = load_log_config()
    logging.config.dictConfig(log_config)

    handlers: List[logging.Handler] = []
    if settings.LOG_HANDLER_LOCAL_ENABLED:
        handlers.append(configure_console_handler(log_config, settings))

    levels: Dict[str, str] = {**settings.LOG_LEVELS, **log_levels_from_environment()}

    for logger_name, logger_config in log_config["loggers"].items():
        logger = logging.getLogger(logger_name)
        for handler in handlers:
            logger.addHandler(handler)
        logger.setLevel(levels.get(logger_name, logger_config.get("level", "INFO")))

    root_logger = logging.getLogger()
    for handler in handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(log_config.get("root", {}).get("level", "INFO"))


def log_levels_from_environment() -> Dict[str, str]:
    levels: Dict[str, str] = {}
    for env_var, value in os.environ.items():
        if not env_var.endswith(LOG_LEVEL_SUFFIX):
            continue
        name: str = env_var[: -len(LOG_LEVEL_SUFFIX)]
        if name.startswith(ENV_PREFIX):
            name = name[len(ENV_PREFIX) :]
        levels[name.lower()] = value.upper()
    return levels


def load_log_config() -> dict:
    source = files("sunforge").joinpath("config").joinpath("logging.conf")
    with as_file(source) as path, open(path) as log_config_file:
        return yaml.safe_load(log_config_file)


def configure_console_handler(log_config: dict, settings: Settings) -> logging.Handler:
    formatter_name: str = (
        "debug-formatter" if settings.DEBUG_LOG_FORMATTER else "colourized"
    )
    handler = logging.StreamHandler()
    handler.setLevel(settings.LOG_LEVELS.get("console", log_config["root"]["level"]))
    handler.setFormatter(
        ColourizedFormatter(
            log_config["formatters"][formatter_name]["format"],
            style="{",
            use_colors=True,
        )
    )
    return handler
