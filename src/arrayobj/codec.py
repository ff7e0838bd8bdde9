from logging import getLogger
from pathlib import Path
from typing import Any

import cloudpickle as pickle  # pyright: ignore[reportMissingTypeStubs]

from arrayobj.errors import MalformedPayloadError
from arrayobj.settings import settings

_logger = getLogger(__name__)


def encode(values: Any) -> bytes:
    """Turn ``values`` into payload bytes using the configured pickle protocol."""
    protocol = settings.pickle_protocol
    payload = pickle.dumps(values, protocol=protocol)
    _logger.debug('Encoded %s into %d bytes (protocol %d)', type(values).__name__, len(payload), protocol)
    return payload


def decode(payload: bytes) -> Any:
    """Turn payload bytes back into a value.

    Raises
    ------
    MalformedPayloadError
        If ``payload`` is not bytes or cannot be unpickled.
    """
    if not isinstance(payload, (bytes, bytearray, memoryview)):
        raise MalformedPayloadError(f'Payload must be bytes, got {type(payload).__name__}')

    try:
        return pickle.loads(payload)
    except Exception as ex:
        raise MalformedPayloadError(f'Cannot decode payload: {ex}') from ex


def load_file(payload_file: Path) -> Any:
    if not payload_file.exists():
        raise FileNotFoundError(f'Payload file not found: {payload_file}')

    return decode(payload_file.read_bytes())


def dump_file(values: Any, payload_file: Path) -> None:
    payload_file.parent.mkdir(parents=True, exist_ok=True)
    with open(payload_file, 'wb') as handle:
        handle.write(encode(values))
