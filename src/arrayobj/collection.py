import math
import re
from typing import Any, Iterable, Iterator, Mapping, MutableMapping

Key = int | str

# Decimal strings that round-trip through int() unchanged ('7', '-3'; not '07', '-0', '+1').
_CANONICAL_INT = re.compile(r'0|-?[1-9][0-9]*')


class Alias:
    """A shared reference cell.

    Storing the same ``Alias`` under two keys (or in two collections) makes
    the slots share one value: writing through either slot is visible
    through the other.

    Examples
    --------
    >>> c = KeyedCollection({'a': 1})
    >>> c.set_alias('b', c.get_alias('a'))
    >>> c['b'] = 2
    >>> c['a']
    2
    """

    __slots__ = ('value',)

    def __init__(self, value: Any = None) -> None:
        self.value = value

    def __repr__(self) -> str:
        return f'Alias({self.value!r})'


def try_normalize_key(index: Any) -> Key | None:
    """Convert ``index`` to a collection key, or return ``None`` when it is not a legal key."""
    match index:
        case None:
            return ''
        case bool():
            return int(index)
        case int():
            return index
        case float():
            if not math.isfinite(index):
                return None
            return int(index)
        case str():
            if _CANONICAL_INT.fullmatch(index):
                return int(index)
            return index
        case _:
            return None


def normalize_key(index: Any) -> Key:
    key = try_normalize_key(index)
    if key is None:
        raise TypeError(f'Illegal offset type: {type(index).__name__}')
    return key


def copy_value(value: Any) -> Any:
    """Copy a value with collection (value type) semantics.

    Collections are deep-copied. Everything else, including arbitrary
    objects, is passed by handle.
    """
    if isinstance(value, KeyedCollection):
        return value.deep_copy()
    return value


class KeyedCollection(MutableMapping[Key, Any]):
    """
    Ordered mapping keyed by integers or strings.

    Keys are normalized on every access, so ``c['1']`` and ``c[1]`` address
    the same entry. Appending assigns the next free integer key, which is
    one past the largest integer key stored so far.

    Entries may hold an :class:`Alias`; reads dereference it and writes
    through :meth:`__setitem__` update the shared cell instead of replacing
    the slot.

    Parameters
    ----------
    items : Mapping[Any, Any] | Iterable[Any] | None, optional
        Initial content. A mapping is copied key by key, any other iterable
        is appended value by value.

    Notes
    -----
    - A missing key raises ``KeyError``; an illegal key type raises
      ``TypeError``.
    - :meth:`over` builds a collection that borrows an existing ``dict`` as
      its entry table instead of copying it.
    """

    _entries: dict[Key, Any]
    _next_index: int

    def __init__(self, items: Mapping[Any, Any] | Iterable[Any] | None = None) -> None:
        self._entries = {}
        self._next_index = 0
        if items is None:
            return

        if isinstance(items, Mapping):
            for key, value in items.items():  # pyright: ignore[reportUnknownVariableType]
                self[key] = value
        else:
            for value in items:
                self.append(value)

    @classmethod
    def over(cls, entries: dict[Any, Any]) -> 'KeyedCollection':
        """Borrow ``entries`` as the entry table. Mutations are shared with the dict's owner."""
        collection = cls.__new__(cls)
        collection._entries = entries
        collection._next_index = _next_free_index(entries)
        return collection

    def __getitem__(self, index: Any) -> Any:
        value = self._entries[normalize_key(index)]
        if isinstance(value, Alias):
            return value.value
        return value

    def __setitem__(self, index: Any, value: Any) -> None:
        if index is None:
            self.append(value)
            return

        key = normalize_key(index)
        current = self._entries.get(key)
        if isinstance(current, Alias):
            current.value = value
        else:
            self._entries[key] = value
        self._track_index(key)

    def __delitem__(self, index: Any) -> None:
        del self._entries[normalize_key(index)]

    def __contains__(self, index: object) -> bool:
        key = try_normalize_key(index)
        return key is not None and key in self._entries

    def __iter__(self) -> Iterator[Key]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.to_dict()!r})'

    def append(self, value: Any) -> int:
        """Store ``value`` under the next free integer key and return that key."""
        key = self._next_index
        if key in self._entries:
            # The borrowed entry table was changed behind our back.
            key = self._next_index = _next_free_index(self._entries)
        self._entries[key] = value
        self._next_index = key + 1
        return key

    def remove(self, index: Any) -> None:
        """Delete ``index`` if present. Missing keys are ignored."""
        self._entries.pop(normalize_key(index), None)

    def get_alias(self, index: Any) -> Alias:
        """Return the alias cell for ``index``, turning a plain slot into an aliased one.

        A missing key is created holding ``None``.
        """
        key = normalize_key(index)
        current = self._entries.get(key)
        if isinstance(current, Alias):
            return current

        alias = Alias(current)
        self._entries[key] = alias
        self._track_index(key)
        return alias

    def set_alias(self, index: Any, alias: Alias) -> None:
        if index is None:
            self.append(alias)
            return

        key = normalize_key(index)
        self._entries[key] = alias
        self._track_index(key)

    def is_alias(self, index: Any) -> bool:
        return isinstance(self._entries.get(normalize_key(index)), Alias)

    def deep_copy(self) -> 'KeyedCollection':
        copied = KeyedCollection()
        for key, value in self._entries.items():
            # Alias cells stay shared between the copies.
            copied._entries[key] = value if isinstance(value, Alias) else copy_value(value)
        copied._next_index = self._next_index
        return copied

    def to_dict(self) -> dict[Key, Any]:
        """Return a plain ``dict`` snapshot, converting nested collections recursively."""
        return {
            key: value.to_dict() if isinstance(value, KeyedCollection) else value
            for key, value in self.items()
        }

    def _track_index(self, key: Key) -> None:
        if isinstance(key, int) and key >= self._next_index:
            self._next_index = key + 1


def _next_free_index(entries: Mapping[Any, Any]) -> int:
    int_keys = [key for key in entries if isinstance(key, int) and not isinstance(key, bool)]
    return max(int_keys) + 1 if int_keys else 0
