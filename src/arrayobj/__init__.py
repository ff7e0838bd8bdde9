# pyright: reportUnusedImport=false
from arrayobj.array_object import ArrayObject, CollectionStorage, ObjectStorage
from arrayobj.collection import Alias, KeyedCollection
from arrayobj.drivers import available_drivers, driver_names, register_driver
from arrayobj.errors import (
    ArrayObjectError,
    ArrayObjectWarning,
    InvalidArgumentError,
    MalformedPayloadError,
    UndefinedIndexWarning,
    UndefinedPropertyWarning,
    UnsupportedOperationWarning,
)
from arrayobj.iterators import ArrayIterator, IteratorFactory, register_iterator_class
from arrayobj.observer import Observer, Subject
from arrayobj.property_bag import PropertyBag
