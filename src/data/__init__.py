from .config import (
    BotConfig, ConnectionConfig, AutoSellConfig, BoneCollectorConfig, AutoEatConfig,
    Vec3, ConfigStore, ConfigError, SaveResult,
)
from .aliases import AliasResolver

__all__ = [
    "BotConfig", "ConnectionConfig", "AutoSellConfig", "BoneCollectorConfig",
    "AutoEatConfig", "Vec3", "ConfigStore", "ConfigError", "SaveResult",
    "AliasResolver",
]
