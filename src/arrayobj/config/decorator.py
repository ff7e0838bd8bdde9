import warnings
from functools import wraps
from typing import Any, Callable, get_type_hints, overload

from arrayobj.config.registry import MISSING, ConfigProperty, register
from arrayobj.config.validation import resolve_config_value


class SettingProperty[T](property):
    """Read-only property whose value is resolved from the bound configuration on every access."""

    def __init__(self, fget: Callable[[Any], T], entry: ConfigProperty) -> None:
        super().__init__(fget, doc=entry.fget.__doc__)
        self.entry = entry

    @overload
    def __get__(self, instance: None, owner: type[Any] | None = None) -> 'SettingProperty[T]': ...
    @overload
    def __get__(self, instance: Any, owner: type[Any] | None = None) -> T: ...

    def __get__(self, instance: Any, owner: type[Any] | None = None) -> 'T | SettingProperty[T]':
        if instance is None:
            return self
        return super().__get__(instance, owner)


@overload
def config_setting[T](
    name: str | None = None, *, default: Any = MISSING
) -> Callable[[Callable[..., T]], SettingProperty[T]]: ...
@overload
def config_setting[T](name: Callable[..., T]) -> SettingProperty[T]: ...


def config_setting[T](
    name: str | Callable[..., T] | None = None,
    *,
    default: Any = MISSING,
) -> Callable[[Callable[..., T]], SettingProperty[T]] | SettingProperty[T]:
    '''Decorator for configuration-backed settings.

    The decorated method's body is never called. Its name (or ``name``) is
    the configuration key, the name of the declaring class scopes it, and
    its return annotation is the expected type checked by
    :func:`~arrayobj.config.validation.ensure_required_config_values`.

    Parameters
    ----------
    name : str | None
        Explicit configuration key to use instead of the method name, by
        default None
    default : Any
        Value returned when the configuration has no entry for the
        setting. Settings without a default are required.

    Returns
    -------
    Callable[[Callable[..., T]], SettingProperty[T]]
        A decorator which converts the given method into a
        configuration-backed property.

    Raises
    ------
    KeyError
        On access, when a required setting has no configuration value.
    '''

    explicit_name = None if callable(name) else name

    def decorator(func: Callable[..., T]) -> SettingProperty[T]:
        qual_parts = func.__qualname__.split('.')
        class_name = qual_parts[-2] if len(qual_parts) >= 2 else qual_parts[0]
        key = explicit_name or func.__name__

        type_hints = get_type_hints(func)
        expected_type: type[Any] | None = None
        if 'return' in type_hints:
            expected_type = type_hints['return']
        else:
            warnings.warn(
                f'Setting "{class_name}.{key}" cannot be type checked because it does not declare a return type',
                RuntimeWarning,
            )

        entry = ConfigProperty(
            key=key,
            collection_name=class_name,
            expected_type=expected_type,
            fget=func,
            default=default,
        )

        @wraps(func)
        def wrapper(self: Any) -> T:
            try:
                return resolve_config_value(key=key, collection_name=type(self).__name__)
            except KeyError:
                if entry.required:
                    raise
                return entry.default

        # Registration occurs at decoration time
        register(entry)

        return SettingProperty(wrapper, entry)

    if callable(name):
        return decorator(name)

    return decorator
