from collections.abc import Iterator

import pytest


@pytest.fixture(autouse=True)
def reset_module_state() -> Iterator[None]:
    """Reset module-level registries and the bound configuration before each test."""
    import arrayobj.config.registry as registry
    import arrayobj.config.validation as validation
    import arrayobj.drivers as drivers

    registry._REGISTRY.clear()  # pyright: ignore[reportPrivateUsage]
    drivers._REGISTRY.clear()  # pyright: ignore[reportPrivateUsage]
    validation.reset_config()

    yield

    validation.reset_config()
