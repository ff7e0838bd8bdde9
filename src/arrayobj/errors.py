class ArrayObjectError(Exception):
    """Base class for errors raised by the container adapter."""


class InvalidArgumentError(ArrayObjectError, TypeError):
    """Raised when a value cannot be used as backing storage.

    Storage must be ``None``, a collection (or an array literal) or an
    object reference. Scalars such as ``int`` or ``str`` are rejected.
    """


class MalformedPayloadError(ArrayObjectError, ValueError):
    """Raised when a serialized payload is missing a slot or has a slot of the wrong type."""


class ArrayObjectWarning(RuntimeWarning):
    """Base class for recoverable diagnostics. The operation completes with a fallback value."""


class UndefinedPropertyWarning(ArrayObjectWarning):
    pass


class UndefinedIndexWarning(ArrayObjectWarning):
    pass


class UnsupportedOperationWarning(ArrayObjectWarning):
    pass
