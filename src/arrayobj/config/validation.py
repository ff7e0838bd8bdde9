from types import MappingProxyType
from typing import Any, Mapping

from arrayobj.config.registry import all_registered

_CONFIG_CONTEXT: dict[str, Any] = {}


class ConfigValidationError(Exception):
    """Raised when configuration validation fails.

    Raised by :func:`ensure_required_config_values` when one or more
    registered settings without a default are missing from the
    configuration, or when a value has the wrong type.
    """


def bind_config_values(**kwargs: Any) -> None:
    """Merge values into the process-wide configuration context.

    Keys are plain strings and are matched using the precedence rules of
    :func:`resolve_config_value`. Later calls override earlier values with
    the same key.
    """
    _CONFIG_CONTEXT.update(kwargs)


def reset_config() -> None:
    """Drop every bound configuration value."""
    _CONFIG_CONTEXT.clear()


def get_config() -> Mapping[str, Any]:
    """Return a read-only view of the bound configuration."""
    return MappingProxyType(_CONFIG_CONTEXT)


def resolve_config_value(
    *, config: Mapping[str, Any] | None = None, key: str, collection_name: str | None = None
) -> Any:
    """Resolve a configuration value using string-based precedence.

    When looking up a setting the function tries keys in this order (first
    match wins):

    - ``{collection_name}.{key}`` as a flat key, or nested as
      ``{collection_name: {key: ...}}``
    - ``{key}``

    Parameters
    ----------
    config:
        The mapping to search. Defaults to the bound configuration.
    key:
        The setting name. Dotted keys are also looked up in nested
        mappings.
    collection_name:
        The name of the class declaring the setting.

    Raises
    ------
    KeyError
        If none of the candidate keys are present in ``config``.
    """
    if config is None:
        config = get_config()

    if collection_name:
        try:
            flat_key = f'{collection_name}.{key}'
            return resolve_config_value(config=config, key=flat_key)
        except KeyError:
            pass

    # Flat keys > nested keys
    if key in config:
        return config[key]

    parts = key.split('.', maxsplit=1)
    if len(parts) == 2:
        collection, restkey = parts
        nested = config.get(collection)
        if isinstance(nested, Mapping):
            return resolve_config_value(config=nested, key=restkey)  # pyright: ignore[reportUnknownArgumentType]

    raise KeyError(f'No config value for {key}')


def ensure_required_config_values(config: Mapping[str, Any] | None = None) -> None:
    """Validate a configuration mapping against the registered settings.

    Settings without a default must resolve to a value. Every resolved
    value must match the registered ``expected_type``. All problems are
    collected before a single :class:`ConfigValidationError` is raised.

    Raises
    ------
    ConfigValidationError
        When required keys are missing or a type mismatch is detected.
    """
    if config is None:
        config = get_config()

    errors: list[str] = []

    for entry in all_registered():
        try:
            value = resolve_config_value(
                config=config,
                key=entry.key,
                collection_name=entry.collection_name,
            )
        except KeyError as exc:
            if entry.required:
                errors.append(str(exc))
            continue

        if entry.expected_type and not isinstance(value, entry.expected_type):
            errors.append(
                f'Type mismatch for {entry.collection_name}.{entry.key}: '
                f'expected {entry.expected_type.__name__}, '
                f'got {type(value).__name__}'
            )

    if errors:
        raise ConfigValidationError('Configuration validation failed:\n' + '\n'.join(errors))
