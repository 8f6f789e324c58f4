import logging

from . import config, fitting, functions, geometry, hull, optimization, parameters, schemas, utils
from .capsule import Capsule
from .fitting import capsule_from_points, check_capsule, compute_bounding_capsule_polyhedron
from .functions import DistanceCapsulePoint, Volume
from .optimization import CapsuleFitter, TorchCapsuleFitter

__version__ = "0.1.0"

__all__ = [
    "configure_logging",
    "Capsule",
    "CapsuleFitter",
    "TorchCapsuleFitter",
    "DistanceCapsulePoint",
    "Volume",
    "capsule_from_points",
    "check_capsule",
    "compute_bounding_capsule_polyhedron",
    "config",
    "fitting",
    "functions",
    "geometry",
    "hull",
    "optimization",
    "parameters",
    "schemas",
    "utils",
]


_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def configure_logging(level="INFO", format_string=None):
    """
    Send capfit log records to stderr at the given level.

    INFO reports one line per fit (vertex counts, start and final volume).
    DEBUG adds the principal axis, end points and every solver step.
    Calling it again replaces the previous handler.

    Args:
        level (str): One of DEBUG, INFO, WARNING, ERROR, CRITICAL (any case).
        format_string (str, optional): `logging.Formatter` format. Defaults to
            time, logger name, level and message.

    Raises:
        ValueError: If `level` is not a known level name.
    """
    name = level.upper()
    if name not in _LOG_LEVELS:
        raise ValueError(f"Invalid log level: {level}. Must be one of {list(_LOG_LEVELS)}")
    log_level = getattr(logging, name)

    handler = logging.StreamHandler()
    handler.setLevel(log_level)
    handler.setFormatter(
        logging.Formatter(format_string or "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )

    logger = logging.getLogger("capfit")
    logger.setLevel(log_level)
    for old in logger.handlers[:]:
        logger.removeHandler(old)
    logger.addHandler(handler)

    # capfit records stop here and are not repeated by the root logger
    logger.propagate = False

    logger.info(f"capfit logging configured to level: {name}")
