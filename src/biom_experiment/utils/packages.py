import importlib
import logging
from types import ModuleType

from biom_experiment.core.exceptions import DependencyMissingError

logger = logging.getLogger(__name__)


def require_package(name: str) -> ModuleType:
    """Import an optional dependency or fail with DependencyMissingError.

    Checked on every call so that installing the package mid-session is
    picked up without reloading.
    """
    try:
        return importlib.import_module(name)
    except ImportError as e:
        logger.debug("Optional dependency %s could not be imported: %s", name, e)
        raise DependencyMissingError(name) from e
