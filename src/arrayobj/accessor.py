"""Dynamic, name-based property access on arbitrary objects.

These functions are the object-mode half of :class:`arrayobj.ArrayObject`:
every indexed operation on an object-backed adapter ends up here with the
index converted to a property name.

Visible instance fields are the public part of an object's instance state:
entries of its ``__dict__`` and filled ``__slots__`` whose names do not start
with an underscore. Class attributes, methods and properties are not
fields. For a :class:`PropertyBag` the visible fields are its field table.
"""

import math
import warnings
from types import MemberDescriptorType
from typing import Any

from arrayobj.errors import UndefinedPropertyWarning
from arrayobj.property_bag import PropertyBag

_MISSING = object()


def property_name(index: Any) -> str:
    match index:
        case None:
            return ''
        case float() if not math.isfinite(index):
            return str(index)
        case bool() | float():
            return str(int(index))
        case _:
            return str(index)


def visible_instance_fields(obj: Any) -> list[tuple[Any, Any]]:
    """List the ``(name, value)`` pairs of the visible instance fields of ``obj``, in definition order."""
    if isinstance(obj, PropertyBag):
        return list(obj.runtime_fields().items())

    fields: dict[str, Any] = {}
    for cls in reversed(type(obj).__mro__):
        slots = cls.__dict__.get('__slots__', ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if _is_visible(name):
                value = getattr(obj, name, _MISSING)
                if value is not _MISSING:
                    fields[name] = value

    instance_dict: dict[str, Any] = getattr(obj, '__dict__', {})
    for name, value in instance_dict.items():
        if isinstance(name, str) and _is_visible(name):
            fields[name] = value

    return list(fields.items())


def property_exists(obj: Any, index: Any) -> bool:
    name = property_name(index)
    if isinstance(obj, PropertyBag):
        return name in obj.runtime_fields()
    return any(field == name for field, _ in visible_instance_fields(obj))


def property_get(obj: Any, index: Any) -> Any:
    """Read a visible instance field. Anything else emits ``UndefinedPropertyWarning`` and yields ``None``."""
    name = property_name(index)
    if isinstance(obj, PropertyBag):
        fields = obj.runtime_fields()
        if name in fields:
            return fields[name]
    else:
        for field, value in visible_instance_fields(obj):
            if field == name:
                return value

    warnings.warn(
        f'Undefined property: {type(obj).__name__}::${name}',
        UndefinedPropertyWarning,
        stacklevel=3,
    )
    return None


def property_set(obj: Any, index: Any, value: Any) -> None:
    """Write an instance field.

    Raises
    ------
    AttributeError
        When ``index`` names a private field, or a method, property or other
        class-level descriptor that the write would shadow or trigger.
    """
    name = property_name(index)
    if isinstance(obj, PropertyBag):
        obj.runtime_fields()[name] = value
        return

    if not _is_visible(name):
        raise AttributeError(f'Cannot access non-public property {type(obj).__name__}::${name}')

    member = _class_member(obj, name)
    if member is not _MISSING and not isinstance(member, MemberDescriptorType):
        if callable(member) or hasattr(type(member), '__get__'):
            raise AttributeError(f'Cannot overwrite member {type(obj).__name__}::{name}')
    setattr(obj, name, value)


def property_unset(obj: Any, index: Any) -> None:
    """Remove a property. Unsetting a property that does not exist is a no-op."""
    name = property_name(index)
    if isinstance(obj, PropertyBag):
        obj.runtime_fields().remove(name)
    elif property_exists(obj, name):
        delattr(obj, name)


def _is_visible(name: str) -> bool:
    return not name.startswith('_')


def _class_member(obj: Any, name: str) -> Any:
    # Slot fields show up here as member descriptors.
    for cls in type(obj).__mro__:
        if name in cls.__dict__:
            return cls.__dict__[name]
    return _MISSING
