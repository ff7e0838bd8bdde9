import cloudpickle  # pyright: ignore[reportMissingTypeStubs]

from arrayobj.config import config_setting


class Serialization:
    """Settings for :mod:`arrayobj.codec` and ``ArrayObject.unserialize``.

    Bind values with ``bind_config_values(**{'Serialization.pickle_protocol': 4})``,
    a nested ``{'Serialization': {...}}`` mapping, or flat keys.
    """

    @config_setting(default=cloudpickle.DEFAULT_PROTOCOL)
    def pickle_protocol(self) -> int:
        """Pickle protocol used when encoding payloads."""
        ...

    @config_setting(default=True)
    def atomic_unserialize(self) -> bool:
        """Commit a decoded state only after every slot validated.

        When false, slots are committed one by one, so a bad slot leaves the
        earlier ones applied.
        """
        ...


settings = Serialization()
