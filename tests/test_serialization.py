import copy
import pickle
from pathlib import Path
from typing import Any

import cloudpickle  # pyright: ignore[reportMissingTypeStubs]
import pytest

from arrayobj import ArrayObject, KeyedCollection, MalformedPayloadError, PropertyBag
from arrayobj import codec
from arrayobj.config import bind_config_values


class Point:
    def __init__(self, x: int, y: int) -> None:
        self.x = x
        self.y = y


def test_state_has_four_slots():
    ao = ArrayObject({'a': 1})
    state = ao.get_state()
    assert len(state) == 4
    assert state[0] == 0
    assert state[1] is ao.storage_value()
    assert state[2] == KeyedCollection()
    assert state[3] is None


def test_round_trip_collection_mode():
    ao = ArrayObject(
        {'a': 1, 'nested': KeyedCollection([1, 2])},
        ArrayObject.STD_PROP_LIST,
        'MyIterator',
    )
    ao.extra = 'x'

    restored = ArrayObject.from_serialized(ao.serialize())

    assert restored.get_flags() == ArrayObject.STD_PROP_LIST
    assert not restored.is_object_mode()
    assert restored.get_array_copy() == ao.get_array_copy()
    assert restored.get_property_list() == KeyedCollection({'extra': 'x'})
    assert restored.extra == 'x'
    assert restored.get_iterator_class() == 'MyIterator'


def test_round_trip_object_mode():
    ao = ArrayObject(Point(1, 2), ArrayObject.ARRAY_AS_PROPS)

    restored = ArrayObject()
    restored.unserialize(ao.serialize())

    assert restored.is_object_mode()
    assert isinstance(restored.storage_value(), Point)
    assert restored.storage_value() is not ao.storage_value()
    assert restored.get_array_copy() == ao.get_array_copy()
    assert restored.x == 1
    assert restored.get_flags() == ArrayObject.ARRAY_AS_PROPS


def test_round_trip_keeps_aliases_within_payload():
    ao = ArrayObject({'a': 1})
    collection = ao.storage_value()
    collection.set_alias('b', collection.get_alias('a'))

    restored = ArrayObject.from_serialized(ao.serialize())
    restored['a'] = 9
    assert restored['b'] == 9
    assert ao['b'] == 1


def test_unserialize_does_not_alias_property_bags():
    bag = PropertyBag(x=1)
    ao = ArrayObject()
    ao.set_state([0, bag, KeyedCollection()])

    assert ao.is_object_mode()
    assert ao.storage_value() is bag
    assert ao['x'] == 1


def test_unserialize_replaces_previous_state():
    ao = ArrayObject(Point(1, 2), ArrayObject.STD_PROP_LIST, 'Other')
    ao.prop = 'old'

    ao.unserialize(ArrayObject({'a': 1}).serialize())

    assert ao.get_flags() == 0
    assert not ao.is_object_mode()
    assert ao.get_iterator_class() == 'ArrayIterator'
    assert ao.get_property_list() == KeyedCollection({'a': 1})


def test_iterator_slot_is_optional_on_read():
    ao = ArrayObject()
    ao.unserialize(codec.encode([1, KeyedCollection({'a': 1}), KeyedCollection()]))
    assert ao.get_flags() == 1
    assert ao['a'] == 1
    assert ao.get_iterator_class() == 'ArrayIterator'


def test_iterator_slot_is_normalized():
    ao = ArrayObject()
    ao.set_state([0, KeyedCollection(), KeyedCollection(), 'ARRAYITERATOR'])
    assert ao.get_state()[3] is None


def test_plain_containers_in_state_are_converted():
    ao = ArrayObject()
    ao.set_state((0, {'a': 1}, {'p': 2}, None))
    assert isinstance(ao.storage_value(), KeyedCollection)
    assert ao['a'] == 1
    assert ao.p == 2


@pytest.mark.parametrize(
    'state',
    [
        ['1', KeyedCollection(), KeyedCollection(), None],
        [True, KeyedCollection(), KeyedCollection(), None],
        [],
        [0],
        [0, None, KeyedCollection()],
        [0, 5, KeyedCollection()],
        [0, 'text', KeyedCollection()],
        [0, KeyedCollection()],
        [0, KeyedCollection(), 'not a collection'],
        [0, KeyedCollection(), KeyedCollection(), 12],
    ],
)
def test_malformed_state(state: list[Any]):
    ao = ArrayObject()
    with pytest.raises(MalformedPayloadError):
        ao.unserialize(codec.encode(state))


@pytest.mark.parametrize('payload', [b'', b'not a pickle', 'text'])
def test_undecodable_payload(payload: Any):
    with pytest.raises(MalformedPayloadError):
        ArrayObject().unserialize(payload)


def test_payload_that_is_not_a_list():
    with pytest.raises(MalformedPayloadError):
        ArrayObject().unserialize(codec.encode({'flags': 0}))


def test_failed_unserialize_is_atomic_by_default():
    ao = ArrayObject({'a': 1})
    payload = codec.encode([2, KeyedCollection({'b': 2}), 'not a collection', None])

    with pytest.raises(MalformedPayloadError):
        ao.unserialize(payload)

    assert ao.get_flags() == 0
    assert ao['a'] == 1
    assert 'b' not in ao


def test_failed_unserialize_keeps_leading_slots_when_not_atomic():
    bind_config_values(**{'Serialization.atomic_unserialize': False})
    ao = ArrayObject({'a': 1})
    payload = codec.encode([2, KeyedCollection({'b': 2}), 'not a collection', None])

    with pytest.raises(MalformedPayloadError):
        ao.unserialize(payload)

    assert ao.get_flags() == 2
    assert 'b' in ao
    assert 'a' not in ao


def test_pickle_protocol_setting():
    bind_config_values(Serialization={'pickle_protocol': 4})
    payload = ArrayObject({'a': 1}).serialize()
    assert payload[:2] == b'\x80\x04'
    assert ArrayObject.from_serialized(payload)['a'] == 1


def test_python_pickling_goes_through_state():
    ao = ArrayObject({'a': 1}, ArrayObject.STD_PROP_LIST, 'MyIterator')
    ao.prop = 'p'

    for restored in (
        pickle.loads(pickle.dumps(ao)),
        cloudpickle.loads(cloudpickle.dumps(ao)),
        copy.deepcopy(ao),
    ):
        assert restored.get_state()[0] == ArrayObject.STD_PROP_LIST
        assert restored['a'] == 1
        assert restored.prop == 'p'
        assert restored.get_iterator_class() == 'MyIterator'


def test_deepcopy_is_independent():
    ao = ArrayObject({'a': 1})
    copied = copy.deepcopy(ao)
    copied['a'] = 2
    assert ao['a'] == 1


def test_shallow_copy_owns_its_collection_and_overlay():
    ao = ArrayObject({'a': 1}, ArrayObject.STD_PROP_LIST, 'MyIterator')
    ao.prop = 'p'

    duplicate = copy.copy(ao)
    duplicate['b'] = 2
    duplicate.prop = 'changed'

    assert 'b' not in ao
    assert ao.prop == 'p'
    assert duplicate['a'] == 1
    assert duplicate.get_flags() == ArrayObject.STD_PROP_LIST
    assert duplicate.get_iterator_class() == 'MyIterator'


def test_shallow_copy_shares_objects_and_borrowed_tables():
    point = Point(1, 2)
    assert copy.copy(ArrayObject(point)).storage_value() is point

    bag = PropertyBag(x=1)
    duplicate = copy.copy(ArrayObject(bag))
    duplicate['y'] = 2
    assert bag.y == 2


def test_payload_files(tmp_path: Path):
    ao = ArrayObject({'a': 1})
    payload_file = tmp_path / 'payloads' / 'a.bin'
    codec.dump_file(ao.get_state(), payload_file)

    assert payload_file.read_bytes() == ao.serialize()
    state = codec.load_file(payload_file)
    assert state[1] == KeyedCollection({'a': 1})

    with pytest.raises(FileNotFoundError):
        codec.load_file(tmp_path / 'missing.bin')
