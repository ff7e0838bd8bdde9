"""Process-wide registry of low-level storage driver names.

Driver packages call :func:`register_driver` when they are imported;
consumers only read the list.
"""

from logging import getLogger
from typing import List

from arrayobj.collection import KeyedCollection

_logger = getLogger(__name__)

_REGISTRY: List[str] = []


def register_driver(name: str) -> None:
    """Add ``name`` to the known drivers. Registering a known name again is a no-op."""
    if name in _REGISTRY:
        return

    _REGISTRY.append(name)
    _logger.debug('Registered driver %s', name)


def driver_names() -> List[str]:
    """Return the known driver names in registration order."""
    return list(_REGISTRY)


def available_drivers() -> KeyedCollection:
    return KeyedCollection(_REGISTRY)
