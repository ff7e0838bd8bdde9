import json
from pathlib import Path

import pytest

from arrayobj import ArrayObject, register_driver
from arrayobj.cli import cli_args_to_config, describe, main
from arrayobj.config import get_config
from arrayobj.config.registry import register
from arrayobj.settings import Serialization


class Point:
    def __init__(self, x: int, y: int) -> None:
        self.x = x
        self.y = y


def test_cli_args_to_config():
    config = cli_args_to_config(
        [
            *('--a', '1'),
            *('--b.c', '2.0'),
            '--d=3',
            '--e=False',
            '--f="foo"',
            'not',
            'parsed',
            '--flag',
            '--flag2',
        ]
    )
    assert config['a'] == 1
    assert config['b.c'] == 2.0
    assert config['d'] == 3
    assert config['e'] == False
    assert config['f'] == 'foo'
    assert config['flag'] == True
    assert config['flag2'] == True
    assert 'not' not in config
    assert 'parsed' not in config


def test_describe_collection_and_object():
    lines = describe(ArrayObject({'a': 1}, ArrayObject.STD_PROP_LIST))
    assert lines == [
        'flags: 1',
        'mode: collection',
        'count: 1',
        'iterator_class: ArrayIterator',
        "  ['a'] => 1",
    ]

    lines = describe(ArrayObject(Point(1, 2)))
    assert 'mode: object' in lines
    assert "  ['y'] => 2" in lines


def test_inspect_payload(tmp_path: Path, capsys: pytest.CaptureFixture[str]):
    payload_file = tmp_path / 'payload.bin'
    payload_file.write_bytes(ArrayObject(['x', 'y'], 0, 'Custom').serialize())

    assert main(['inspect', str(payload_file)]) == 0
    out = capsys.readouterr().out
    assert 'count: 2' in out
    assert 'iterator_class: Custom' in out
    assert "[1] => 'y'" in out


def test_inspect_missing_or_malformed_payload(tmp_path: Path):
    assert main(['inspect', str(tmp_path / 'missing.bin')]) == 1

    bad_file = tmp_path / 'bad.bin'
    bad_file.write_bytes(b'garbage')
    assert main(['inspect', str(bad_file)]) == 1


def test_drivers(capsys: pytest.CaptureFixture[str]):
    register_driver('sqlite')
    register_driver('pgsql')
    assert main(['drivers']) == 0
    assert capsys.readouterr().out.splitlines() == ['sqlite', 'pgsql']


def test_config_file_and_overrides_are_bound(tmp_path: Path):
    config_file = tmp_path / 'config.json'
    config_file.write_text(json.dumps({'Serialization': {'pickle_protocol': 4}}))

    assert main(['-c', str(config_file), 'drivers', '--Serialization.atomic_unserialize=false']) == 0

    config = get_config()
    assert config['Serialization'] == {'pickle_protocol': 4}
    assert config['Serialization.atomic_unserialize'] is False


@pytest.fixture
def serialization_settings() -> None:
    for name in ('pickle_protocol', 'atomic_unserialize'):
        register(Serialization.__dict__[name].entry)


@pytest.mark.usefixtures('serialization_settings')
def test_invalid_config_fails_before_running(tmp_path: Path, capsys: pytest.CaptureFixture[str]):
    payload_file = tmp_path / 'payload.bin'
    payload_file.write_bytes(ArrayObject({'a': 1}).serialize())

    assert main(['inspect', str(payload_file), '--Serialization.pickle_protocol=abc']) == 1
    assert capsys.readouterr().out == ''


@pytest.mark.usefixtures('serialization_settings')
def test_invalid_config_file_is_rejected(tmp_path: Path):
    config_file = tmp_path / 'config.json'
    config_file.write_text(json.dumps({'Serialization': {'atomic_unserialize': 'yes'}}))

    assert main(['-c', str(config_file), 'drivers']) == 1


@pytest.mark.usefixtures('serialization_settings')
def test_valid_config_passes_validation(tmp_path: Path, capsys: pytest.CaptureFixture[str]):
    register_driver('sqlite')
    assert main(['drivers', '--Serialization.pickle_protocol=4']) == 0
    assert capsys.readouterr().out.splitlines() == ['sqlite']
