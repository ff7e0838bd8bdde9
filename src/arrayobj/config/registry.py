from dataclasses import dataclass
from typing import Any, Callable, Final, List


class _Missing:
    def __repr__(self) -> str:
        return 'MISSING'


MISSING: Final = _Missing()


@dataclass(frozen=True)
class ConfigProperty:
    """Metadata for a configuration-backed setting.

    The registry stores these entries so validation can check a bound
    configuration without importing the classes that declare the
    settings.

    Attributes
    ----------
    key:
        The name used in the configuration mapping.
    collection_name:
        The name of the class that declares the setting. Used to build
        class-scoped keys such as ``Serialization.pickle_protocol``.
    expected_type:
        The Python type expected for the configuration value, or ``None``
        when no type checking should be performed.
    fget:
        The original getter function the setting was declared with.
    default:
        Value used when the configuration holds no entry for the setting,
        or ``MISSING`` when the setting is required.
    """

    key: str
    collection_name: str
    expected_type: type[Any] | None
    fget: Callable[..., Any]
    default: Any = MISSING

    @property
    def required(self) -> bool:
        return self.default is MISSING


_REGISTRY: List[ConfigProperty] = []


def register(entry: ConfigProperty) -> None:
    """Register a ``ConfigProperty`` entry in the global registry.

    No uniqueness checks are performed; callers are expected to avoid
    duplicate registrations.
    """

    _REGISTRY.append(entry)


def all_registered() -> List[ConfigProperty]:
    """Return a shallow copy of all registered configuration entries."""

    return list(_REGISTRY)
