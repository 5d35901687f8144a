"""Configuration values sourced from environment variables."""

import os
from typing import Final

from src.enums import DialectName

_default_dialect = os.getenv(key="DEFAULT_DIALECT", default="generic")


DEFAULT_DIALECT: Final[str] = DialectName(_default_dialect)
DELIMITED_IDENTIFIERS: Final[bool] = bool(
    os.getenv(key="DELIMITED_IDENTIFIERS", default="False").upper() == "TRUE"
)
LOG_LEVEL: Final[str] = os.getenv(key="LOG_LEVEL", default="INFO")
LOGGER_NAME: Final[str] = os.getenv(key="LOGGER_NAME", default="ddl-engine")
LOG_COLOUR_ENABLED: Final[bool] = bool(
    os.getenv(key="LOG_COLOUR_ENABLED", default="True").upper() == "TRUE"
)
