"""Configuration and in-code declaration of ordering rules."""

from rules.config import (
    ConfigError,
    OrderGraphConfig,
    load_config,
)
from rules.declare import (
    UnitRegistry,
    execute_after,
    execute_before,
    execution_order,
    module_id_for,
)

__all__ = [
    "ConfigError",
    "OrderGraphConfig",
    "UnitRegistry",
    "execute_after",
    "execute_before",
    "execution_order",
    "load_config",
    "module_id_for",
]
