import warnings
from dataclasses import dataclass
from logging import getLogger
from types import SimpleNamespace
from typing import Any, Callable, Final, Iterator, Sequence

from arrayobj import accessor, codec
from arrayobj.collection import Alias, KeyedCollection, copy_value, try_normalize_key
from arrayobj.errors import (
    InvalidArgumentError,
    MalformedPayloadError,
    UndefinedIndexWarning,
    UndefinedPropertyWarning,
    UnsupportedOperationWarning,
)
from arrayobj.iterators import (
    DEFAULT_ITERATOR_CLASS,
    ArrayIterator,
    IteratorFactory,
    default_iterator_factory,
)
from arrayobj.property_bag import PropertyBag
from arrayobj.settings import settings

_logger = getLogger(__name__)

_SCALARS: Final = (bool, int, float, complex, str, bytes, bytearray)


@dataclass(frozen=True, slots=True)
class CollectionStorage:
    collection: KeyedCollection
    # The entry table belongs to a PropertyBag or SimpleNamespace.
    borrowed: bool = False


@dataclass(frozen=True, slots=True)
class ObjectStorage:
    target: object


Storage = CollectionStorage | ObjectStorage


class ArrayObject:
    """
    A value that acts as a keyed collection and as an object with properties.

    The adapter wraps either a :class:`KeyedCollection` (collection mode) or
    an arbitrary object (object mode). Indexed access, counting, iteration
    and copying go to whichever storage is active. Dynamic properties go to
    a separate overlay collection, or into the storage when the
    ``ARRAY_AS_PROPS`` flag is set.

    Parameters
    ----------
    input : Any, optional
        Initial storage. ``None`` starts with an empty collection. A
        ``KeyedCollection`` is used as is, ``dict``/``list``/``tuple`` are
        converted to a new collection. A :class:`PropertyBag` or
        ``types.SimpleNamespace`` lends its own field table, so writes are
        visible on the original object. Any other object is wrapped in
        object mode.

        A namespace's ``__dict__`` is borrowed without key normalization:
        an attribute named ``'1'`` is not reachable as ``ao[1]`` or
        ``ao['1']``, and integer keys written through the adapter land in
        the namespace's ``__dict__`` as integers.
    flags : int, optional
        Combination of ``STD_PROP_LIST`` and ``ARRAY_AS_PROPS``.
    iterator_class : str | None, optional
        Name of the iterator type created by :meth:`get_iterator`.
    iterators : IteratorFactory | None, optional
        Factory resolving ``iterator_class``. Defaults to the process-wide
        factory.

    Raises
    ------
    InvalidArgumentError
        When ``input`` is a scalar.

    Examples
    --------
    >>> ao = ArrayObject({'a': 1}, ArrayObject.ARRAY_AS_PROPS)
    >>> ao.a
    1
    >>> ao.b = 2
    >>> ao['b']
    2
    """

    STD_PROP_LIST: Final = 1
    ARRAY_AS_PROPS: Final = 2

    _storage: Storage
    _flags: int
    _overlay: KeyedCollection | None
    _iterator_class: str | None
    _iterators: IteratorFactory

    def __init__(
        self,
        input: Any = None,
        flags: int = 0,
        iterator_class: str | None = None,
        *,
        iterators: IteratorFactory | None = None,
    ) -> None:
        self._iterators = iterators or default_iterator_factory()
        self._overlay = None
        self._assign_storage(input)
        self.set_iterator_class(iterator_class)
        self.set_flags(flags)

    # Storage

    def _assign_storage(self, value: Any) -> None:
        match value:
            case None:
                self._storage = CollectionStorage(KeyedCollection())
            case KeyedCollection():
                self._storage = CollectionStorage(value)
            case dict() | list() | tuple():
                self._storage = CollectionStorage(KeyedCollection(value))  # pyright: ignore[reportUnknownArgumentType]
            case _ if isinstance(value, _SCALARS):
                raise InvalidArgumentError(
                    f'Storage must be a collection or an object, got {type(value).__name__}'
                )
            case _ if type(value) is PropertyBag:
                # Borrow the bag's own field table.
                self._storage = CollectionStorage(value.runtime_fields(), borrowed=True)
            case _ if type(value) is SimpleNamespace:
                self._storage = CollectionStorage(KeyedCollection.over(vars(value)), borrowed=True)
            case _:
                self._storage = ObjectStorage(value)

        _logger.debug('Storage switched to %s', type(self._storage).__name__)

    def storage_value(self) -> Any:
        """Return the current storage as a single value: the collection or the object."""
        match self._storage:
            case CollectionStorage(collection):
                return collection
            case ObjectStorage(target):
                return target

    def is_object_mode(self) -> bool:
        return isinstance(self._storage, ObjectStorage)

    # Indexed access

    def offset_exists(self, index: Any) -> bool:
        match self._storage:
            case CollectionStorage(collection):
                key = try_normalize_key(index)
                return key is not None and key in collection
            case ObjectStorage(target):
                return accessor.property_exists(target, index)

    def offset_get(self, index: Any) -> Any:
        match self._storage:
            case CollectionStorage(collection):
                try:
                    return collection[index]
                except KeyError:
                    warnings.warn(
                        f'Undefined array key {index!r}', UndefinedIndexWarning, stacklevel=2
                    )
                    return None
            case ObjectStorage(target):
                return accessor.property_get(target, index)

    def offset_set(self, index: Any, value: Any) -> None:
        match self._storage:
            case CollectionStorage(collection):
                if index is None:
                    collection.append(value)
                elif isinstance(value, Alias):
                    collection.set_alias(index, value)
                else:
                    collection[index] = value
            case ObjectStorage(target):
                accessor.property_set(target, index, value)

    def offset_unset(self, index: Any) -> None:
        match self._storage:
            case CollectionStorage(collection):
                collection.remove(index)
            case ObjectStorage(target):
                accessor.property_unset(target, index)

    def count(self) -> int:
        """Number of entries, or of visible instance fields in object mode. Dynamic properties are not counted."""
        match self._storage:
            case CollectionStorage(collection):
                return len(collection)
            case ObjectStorage(target):
                return len(accessor.visible_instance_fields(target))

    # Dynamic properties

    def set_property(self, name: Any, value: Any) -> None:
        if not self._flags & self.ARRAY_AS_PROPS:
            if self._overlay is None:
                self._overlay = KeyedCollection()
            self._overlay[name] = copy_value(value)
            return

        match self._storage:
            case CollectionStorage(collection):
                collection[name] = copy_value(value)
            case ObjectStorage(target):
                accessor.property_set(target, name, value)

    def get_property(self, name: Any) -> Any:
        if self._flags & self.ARRAY_AS_PROPS:
            return self.offset_get(name)

        if self._overlay is not None and name in self._overlay:
            return self._overlay[name]

        warnings.warn(
            f'Undefined property: {type(self).__name__}::${name}',
            UndefinedPropertyWarning,
            stacklevel=2,
        )
        return None

    def unset_property(self, name: Any) -> None:
        if self._flags & self.ARRAY_AS_PROPS:
            self.offset_unset(name)
            return

        if self._overlay is None or name not in self._overlay:
            raise AttributeError(name)
        del self._overlay[name]

    def get_property_list(self) -> KeyedCollection:
        """Return what the object shows as its property list.

        With ``STD_PROP_LIST`` this is a copy of the dynamic properties,
        otherwise the storage content (see :meth:`get_array_copy`).
        """
        if self._flags & self.STD_PROP_LIST:
            return self._overlay.deep_copy() if self._overlay is not None else KeyedCollection()
        return self.get_array_copy()

    # Iteration

    def get_iterator(self) -> Iterator[Any]:
        if self._iterator_class is None:
            return ArrayIterator(self.storage_value())
        return self._iterators.create(self._iterator_class, self.storage_value())

    def get_iterator_class(self) -> str:
        return self._iterator_class or DEFAULT_ITERATOR_CLASS

    def set_iterator_class(self, iterator_class: str | None) -> None:
        if iterator_class is None or iterator_class.casefold() == DEFAULT_ITERATOR_CLASS.casefold():
            iterator_class = None
        self._iterator_class = iterator_class

    # Flags

    def get_flags(self) -> int:
        return self._flags

    def set_flags(self, flags: int) -> None:
        self._flags = flags

    # Whole-storage operations

    def append(self, value: Any) -> None:
        match self._storage:
            case CollectionStorage(collection):
                collection.append(value)
            case ObjectStorage():
                warnings.warn(
                    f'Cannot append properties to objects, use {type(self).__name__}.offset_set() instead',
                    UnsupportedOperationWarning,
                    stacklevel=2,
                )

    def exchange_array(self, input: Any) -> Any:
        """Replace the storage and return the previous storage value."""
        previous = self.storage_value()
        self._assign_storage(input)
        return previous

    def get_array_copy(self) -> KeyedCollection:
        match self._storage:
            case CollectionStorage(collection):
                return collection.deep_copy()
            case ObjectStorage(target):
                return KeyedCollection(dict(accessor.visible_instance_fields(target)))

    # Sorting is not supported.

    def asort(self, flags: int = 0) -> None:
        raise NotImplementedError(f'{type(self).__name__}.asort() is not supported')

    def ksort(self, flags: int = 0) -> None:
        raise NotImplementedError(f'{type(self).__name__}.ksort() is not supported')

    def natcasesort(self) -> None:
        raise NotImplementedError(f'{type(self).__name__}.natcasesort() is not supported')

    def natsort(self) -> None:
        raise NotImplementedError(f'{type(self).__name__}.natsort() is not supported')

    def uasort(self, cmp_function: Callable[[Any, Any], int]) -> None:
        raise NotImplementedError(f'{type(self).__name__}.uasort() is not supported')

    def uksort(self, cmp_function: Callable[[Any, Any], int]) -> None:
        raise NotImplementedError(f'{type(self).__name__}.uksort() is not supported')

    # Serialization

    def get_state(self) -> list[Any]:
        """Return the serialized form ``[flags, storage, dynamic properties, iterator class or None]``."""
        return [
            self._flags,
            self.storage_value(),
            self._overlay if self._overlay is not None else KeyedCollection(),
            self._iterator_class,
        ]

    def set_state(self, state: Sequence[Any]) -> None:
        """Restore the adapter from a state produced by :meth:`get_state`.

        Slots are checked in order. Storage restored here never borrows a
        property bag's field table. With the ``Serialization.atomic_unserialize``
        setting disabled, slots that passed validation stay applied when a
        later slot fails.

        Raises
        ------
        MalformedPayloadError
            When a required slot is missing or has the wrong type.
        """
        if isinstance(state, (str, bytes)) or not isinstance(state, Sequence):
            raise MalformedPayloadError(
                f'State must be a sequence, got {type(state).__name__}'
            )

        atomic = settings.atomic_unserialize
        target = ArrayObject(iterators=self._iterators) if atomic else self

        # 0: flags
        flags = state[0] if len(state) > 0 else None
        if not isinstance(flags, int) or isinstance(flags, bool):
            raise MalformedPayloadError('Slot 0 (flags) must be an integer')
        target._flags = flags

        # 1: storage
        storage = state[1] if len(state) > 1 else None
        match storage:
            case KeyedCollection():
                target._storage = CollectionStorage(storage)
            case dict() | list() | tuple():
                target._storage = CollectionStorage(KeyedCollection(storage))  # pyright: ignore[reportUnknownArgumentType]
            case None:
                raise MalformedPayloadError('Slot 1 (storage) is missing')
            case _ if isinstance(storage, _SCALARS):
                raise MalformedPayloadError('Slot 1 (storage) must be a collection or an object')
            case _:
                target._storage = ObjectStorage(storage)

        # 2: dynamic properties
        overlay = state[2] if len(state) > 2 else None
        match overlay:
            case KeyedCollection():
                target._overlay = overlay
            case dict():
                target._overlay = KeyedCollection(overlay)  # pyright: ignore[reportUnknownArgumentType]
            case _:
                raise MalformedPayloadError('Slot 2 (properties) must be a collection')

        # 3: iterator class, optional
        iterator_class = state[3] if len(state) > 3 else None
        if iterator_class is not None and not isinstance(iterator_class, str):
            raise MalformedPayloadError('Slot 3 (iterator class) must be a string')
        target.set_iterator_class(iterator_class)

        if atomic:
            self._flags = target._flags
            self._storage = target._storage
            self._overlay = target._overlay
            self._iterator_class = target._iterator_class

    def serialize(self) -> bytes:
        return codec.encode(self.get_state())

    def unserialize(self, payload: bytes) -> None:
        state = codec.decode(payload)
        if not isinstance(state, (list, tuple)):
            raise MalformedPayloadError(f'Payload must decode to a list, got {type(state).__name__}')
        _logger.debug('Restoring %s from %d bytes', type(self).__name__, len(payload))
        self.set_state(state)  # pyright: ignore[reportUnknownArgumentType]

    @classmethod
    def from_serialized(cls, payload: bytes, *, iterators: IteratorFactory | None = None) -> 'ArrayObject':
        instance = cls(iterators=iterators)
        instance.unserialize(payload)
        return instance

    def __copy__(self) -> 'ArrayObject':
        """Copy the adapter. Owned collections and the overlay are copied; objects and borrowed tables stay shared."""
        duplicate = type(self)(iterators=self._iterators)
        match self._storage:
            case CollectionStorage(collection, borrowed=False):
                duplicate._storage = CollectionStorage(collection.deep_copy())
            case storage:
                duplicate._storage = storage
        duplicate._flags = self._flags
        duplicate._overlay = self._overlay.deep_copy() if self._overlay is not None else None
        duplicate._iterator_class = self._iterator_class
        return duplicate

    def __reduce__(self) -> tuple[Any, ...]:
        return (type(self), (), self.get_state())

    def __setstate__(self, state: list[Any]) -> None:
        self.set_state(state)

    # Python protocols

    def __getitem__(self, index: Any) -> Any:
        return self.offset_get(index)

    def __setitem__(self, index: Any, value: Any) -> None:
        self.offset_set(index, value)

    def __delitem__(self, index: Any) -> None:
        self.offset_unset(index)

    def __contains__(self, index: Any) -> bool:
        return self.offset_exists(index)

    def __len__(self) -> int:
        return self.count()

    def __iter__(self) -> Iterator[Any]:
        return self.get_iterator()

    def __getattr__(self, name: str) -> Any:
        # Only called when normal lookup fails. Private and special names
        # are never dynamic properties.
        if name.startswith('_'):
            raise AttributeError(name)
        return self.get_property(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith('_'):
            object.__setattr__(self, name, value)
            return
        self.set_property(name, value)

    def __delattr__(self, name: str) -> None:
        if name.startswith('_'):
            object.__delattr__(self, name)
            return
        self.unset_property(name)

    def __dir__(self) -> list[str]:
        names = list(super().__dir__())
        if self._flags & self.STD_PROP_LIST and self._overlay is not None:
            names.extend(str(key) for key in self._overlay)
        return names

    def __repr__(self) -> str:
        mode = 'object' if self.is_object_mode() else 'collection'
        return f'{type(self).__name__}({mode}, flags={self._flags}, {self.get_property_list().to_dict()!r})'
