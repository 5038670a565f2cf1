"""
Process-wide console logging for applications built on the engine.

Usage:
    from coinchan import logging_config
    logging_config.setup(config.log_level, rpc_debug=config.log_rpc)
"""

import logging
import sys
from typing import Union

PACKAGE_LOGGERS = ("zamm", "coinchan")
RPC_LOGGERS = ("web3", "urllib3")

LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def resolve_level(level: Union[str, int]) -> int:
    """Map a level name such as "debug" to its logging constant."""
    if isinstance(level, int):
        return level
    name = str(level).upper()
    if name not in LEVEL_NAMES:
        raise ValueError(f"Unknown log level: {level}")
    return getattr(logging, name)


def setup(level: Union[str, int] = "INFO", rpc_debug: bool = False) -> None:
    """
    Send all engine logs to stdout at one level.

    RPC client loggers stay at WARNING unless rpc_debug is set, in which case
    every request is logged.
    """
    level = resolve_level(level)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)-7s | %(message)s", datefmt="%H:%M:%S"
        )
    )
    root.addHandler(console)

    for name in RPC_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if rpc_debug else logging.WARNING)

    # get_logger() pins a level on every module logger, so parents alone won't do
    for name, existing in list(logging.root.manager.loggerDict.items()):
        if isinstance(existing, logging.Logger) and name.split(".")[0] in PACKAGE_LOGGERS:
            existing.setLevel(level)
    for name in PACKAGE_LOGGERS:
        logging.getLogger(name).setLevel(level)
