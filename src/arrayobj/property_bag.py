from typing import Any, Iterator, Mapping, MutableMapping

from arrayobj.collection import Key, KeyedCollection


class PropertyBag(MutableMapping[Key, Any]):
    """
    Plain generic object: a bag of dynamic properties.

    Every field lives in a :class:`KeyedCollection` that can be read and
    written as attributes or as mapping keys. An :class:`ArrayObject`
    constructed from a ``PropertyBag`` borrows that collection, so writes
    through either view are visible through the other.

    Parameters
    ----------
    fields : Mapping[Any, Any] | None, optional
        Initial fields.
    **kwargs : Any
        More initial fields, applied after ``fields``.

    Notes
    -----
    - A missing attribute raises ``AttributeError``, a missing key raises
      ``KeyError``.
    - Names starting with an underscore are not fields when used as
      attributes; use item access for those.

    Examples
    --------
    >>> bag = PropertyBag(x=5)
    >>> bag.x
    5
    >>> bag['y'] = 2
    >>> bag.y
    2
    """

    _fields: KeyedCollection

    def __init__(self, fields: Mapping[Any, Any] | None = None, **kwargs: Any) -> None:
        # Use object.__setattr__ to avoid recursion into __setattr__.
        object.__setattr__(self, '_fields', KeyedCollection(fields))
        self._fields.update(kwargs)

    def runtime_fields(self) -> KeyedCollection:
        """Return the live field table."""
        return self._fields

    def __getattribute__(self, name: str) -> Any:
        if name.startswith('_'):
            return object.__getattribute__(self, name)

        # Methods and class attributes win over fields.
        try:
            return object.__getattribute__(self, name)
        except AttributeError:
            pass

        fields = object.__getattribute__(self, '_fields')
        try:
            return fields[name]
        except KeyError:
            raise AttributeError(
                f"'{type(self).__name__}' object has no property '{name}'"
            ) from None

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith('_'):
            object.__setattr__(self, name, value)
            return
        self._fields[name] = value

    def __delattr__(self, name: str) -> None:
        if name.startswith('_'):
            object.__delattr__(self, name)
            return
        try:
            del self._fields[name]
        except KeyError:
            raise AttributeError(name) from None

    def __getitem__(self, name: Any) -> Any:
        return self._fields[name]

    def __setitem__(self, name: Any, value: Any) -> None:
        self._fields[name] = value

    def __delitem__(self, name: Any) -> None:
        del self._fields[name]

    def __iter__(self) -> Iterator[Key]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        body = ', '.join(f'{key}={value!r}' for key, value in self._fields.items())
        return f'{type(self).__name__}({body})'

    def __getstate__(self) -> KeyedCollection:
        return self._fields

    def __setstate__(self, state: KeyedCollection) -> None:
        object.__setattr__(self, '_fields', state)
