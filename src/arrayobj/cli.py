import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from arrayobj.array_object import ArrayObject
from arrayobj.config import (
    ConfigValidationError,
    bind_config_values,
    ensure_required_config_values,
    load_config_file,
)
from arrayobj.drivers import driver_names
from arrayobj.errors import MalformedPayloadError

_logger = logging.getLogger(__name__)


def default_argparser(description: str = 'Inspect ArrayObject payloads') -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='arrayobj', description=description)
    parser.add_argument(
        '-c',
        '--config',
        type=Path,
        default=None,
        help='Optional, path to a configuration file (supported extensions: *.json, *.yaml/yml, *.toml)',
    )
    parser.add_argument(
        '-v', '--verbose', action='store_true', help='Log debug messages to stderr.'
    )

    commands = parser.add_subparsers(dest='command', required=True)
    inspect = commands.add_parser('inspect', help='Print the content of a serialized payload file.')
    inspect.add_argument('payload', type=Path, help='Path to a file holding ArrayObject.serialize() bytes.')
    commands.add_parser('drivers', help='List the registered storage drivers.')

    return parser


def cli_args_to_config(args: list[str]) -> dict[str, Any]:
    """Convert ``--a 1 --b.c 2 --d=3 --flag`` tokens into a config mapping.

    Tokens not starting with ``--`` are ignored. A bare flag becomes ``True``.
    """
    parsed: dict[str, Any] = {}

    i = 0
    while i < len(args):
        token = args[i]
        if not token.startswith('--'):
            i += 1
            continue

        key_val = token[2:]
        if '=' in key_val:
            key, val_str = key_val.split('=', 1)
        else:
            # Look ahead for a separate value token.
            if i + 1 < len(args) and not args[i + 1].startswith('-'):
                val_str = args[i + 1]
                i += 1
            else:
                val_str = None
            key = key_val

        parsed[key] = _convert_value(val_str)
        i += 1

    return parsed


def describe(array: ArrayObject) -> list[str]:
    mode = 'object' if array.is_object_mode() else 'collection'
    lines = [
        f'flags: {array.get_flags()}',
        f'mode: {mode}',
        f'count: {array.count()}',
        f'iterator_class: {array.get_iterator_class()}',
    ]
    lines.extend(f'  [{key!r}] => {value!r}' for key, value in array.get_array_copy().items())
    return lines


def main(argv: list[str] | None = None) -> int:
    parser = default_argparser()
    namespace, rest_args = parser.parse_known_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if namespace.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    if namespace.config is not None:
        bind_config_values(**load_config_file(namespace.config))
    overrides = cli_args_to_config(rest_args)
    if overrides:
        bind_config_values(**overrides)

    try:
        ensure_required_config_values()
    except ConfigValidationError as ex:
        _logger.error('%s', ex)
        return 1

    match namespace.command:
        case 'drivers':
            for name in driver_names():
                print(name)
        case 'inspect':
            try:
                array = ArrayObject.from_serialized(namespace.payload.read_bytes())
            except (FileNotFoundError, MalformedPayloadError) as ex:
                _logger.error('%s', ex)
                return 1
            print('\n'.join(describe(array)))
        case _:
            parser.error(f'Unknown command: {namespace.command}')

    return 0


def _convert_value(val: str | None) -> Any:
    # Flag
    if val is None:
        return True

    low = val.lower()
    if low == 'true':
        return True
    if low == 'false':
        return False

    try:
        return int(val)
    except ValueError:
        pass

    try:
        return float(val)
    except ValueError:
        pass

    # Handle strings
    if len(val) >= 2 and ((val[0] == val[-1] == "'") or (val[0] == val[-1] == '"')):
        return val[1:-1]
    return val


if __name__ == '__main__':
    sys.exit(main())
