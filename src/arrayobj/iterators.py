from logging import getLogger
from typing import Any, Callable, Iterator

from dependency_injector import providers

from arrayobj.accessor import property_get, visible_instance_fields
from arrayobj.collection import Key, KeyedCollection

_logger = getLogger(__name__)

DEFAULT_ITERATOR_CLASS = 'ArrayIterator'


class ArrayIterator(Iterator[Key]):
    """Default iterator over a collection or over the visible fields of an object.

    Supports a cursor protocol (``rewind``/``valid``/``current``/``key``/``next``)
    and Python iteration, which yields keys. Keys are snapshotted on
    :meth:`rewind`; values are read live, and entries removed after the
    snapshot are skipped.
    """

    _storage: Any
    _keys: list[Any]
    _position: int

    def __init__(self, array: Any = None) -> None:
        if array is None:
            array = KeyedCollection()
        elif isinstance(array, (dict, list, tuple)):
            array = KeyedCollection(array)  # pyright: ignore[reportUnknownArgumentType]
        self._storage = array
        self.rewind()

    def rewind(self) -> None:
        if isinstance(self._storage, KeyedCollection):
            self._keys = list(self._storage)
        else:
            self._keys = [name for name, _ in visible_instance_fields(self._storage)]
        self._position = 0

    def valid(self) -> bool:
        while self._position < len(self._keys):
            if self._has(self._keys[self._position]):
                return True
            self._position += 1
        return False

    def key(self) -> Any:
        if not self.valid():
            return None
        return self._keys[self._position]

    def current(self) -> Any:
        if not self.valid():
            return None
        key = self._keys[self._position]
        if isinstance(self._storage, KeyedCollection):
            return self._storage[key]
        return property_get(self._storage, key)

    def next(self) -> None:
        self._position += 1

    def count(self) -> int:
        if isinstance(self._storage, KeyedCollection):
            return len(self._storage)
        return len(visible_instance_fields(self._storage))

    def get_array_copy(self) -> KeyedCollection:
        if isinstance(self._storage, KeyedCollection):
            return self._storage.deep_copy()
        return KeyedCollection(dict(visible_instance_fields(self._storage)))

    def __iter__(self) -> 'ArrayIterator':
        self.rewind()
        return self

    def __next__(self) -> Key:
        if not self.valid():
            raise StopIteration
        key = self._keys[self._position]
        self.next()
        return key

    def __len__(self) -> int:
        return self.count()

    def _has(self, key: Any) -> bool:
        if isinstance(self._storage, KeyedCollection):
            return key in self._storage
        return any(name == key for name, _ in visible_instance_fields(self._storage))


class IteratorFactory:
    """Creates iterators by class name.

    Names are matched case-insensitively. Factories are wrapped in
    ``dependency_injector`` providers; a provider may also be registered
    directly. The created iterator receives the storage value as its sole
    positional argument.
    """

    _providers: dict[str, tuple[str, providers.Provider]]

    def __init__(self) -> None:
        self._providers = {}
        self.register(DEFAULT_ITERATOR_CLASS, ArrayIterator)

    def __contains__(self, name: Any) -> bool:
        return isinstance(name, str) and name.casefold() in self._providers

    def register(
        self,
        name: str,
        factory: Callable[..., Any] | providers.Provider,
        *,
        allow_override: bool = False,
    ) -> None:
        """Register an iterator type under ``name``.

        Parameters
        ----------
        name : str
            The iterator class name.
        factory : Callable[..., Any] | providers.Provider
            A class, a callable taking the storage value, or a provider.
        allow_override : bool
            When false, raises a RuntimeError when ``name`` is already
            registered, by default False

        Raises
        ------
        RuntimeError
            When `allow_override` is false and ``name`` is already registered.
        """
        key = name.casefold()
        if not allow_override and key in self._providers:
            raise RuntimeError(f'Iterator class "{name}" already registered.')

        if not isinstance(factory, providers.Provider):
            factory = providers.Factory(factory)

        self._providers[key] = (name, factory)  # pyright: ignore[reportUnknownArgumentType]

    def unregister(self, name: str) -> None:
        del self._providers[name.casefold()]

    def names(self) -> list[str]:
        return [name for name, _ in self._providers.values()]

    def create(self, name: str, storage: Any) -> Any:
        """Instantiate the iterator registered as ``name`` around ``storage``.

        Raises
        ------
        LookupError
            When no iterator class is registered under ``name``.
        """
        entry = self._providers.get(name.casefold())
        if entry is None:
            raise LookupError(f"Cannot resolve iterator class '{name}'")

        _logger.debug('Creating iterator %s over %s', entry[0], type(storage).__name__)
        return entry[1](storage)


_DEFAULT_FACTORY = IteratorFactory()


def default_iterator_factory() -> IteratorFactory:
    return _DEFAULT_FACTORY


def register_iterator_class(
    name: str,
    factory: Callable[..., Any] | providers.Provider,
    *,
    allow_override: bool = False,
) -> None:
    """Register an iterator type on the process-wide factory."""
    _DEFAULT_FACTORY.register(name, factory, allow_override=allow_override)
