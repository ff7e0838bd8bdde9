# pyright: reportUnusedImport=false
from arrayobj.config.decorator import config_setting
from arrayobj.config.loader import load_config_file
from arrayobj.config.registry import MISSING, ConfigProperty
from arrayobj.config.validation import (
    ConfigValidationError,
    bind_config_values,
    ensure_required_config_values,
    get_config,
    reset_config,
    resolve_config_value,
)
