from .errors import (
    FaultKind, FaultSignature, SessionFault, SessionError,
    classify_error, describe_kick_reason, install_fault_handlers,
)
from .client import GameSession, MineflayerSession, WindowView, SlotItem, DroppedItem

__all__ = [
    "FaultKind", "FaultSignature", "SessionFault", "SessionError",
    "classify_error", "describe_kick_reason", "install_fault_handlers",
    "GameSession", "MineflayerSession", "WindowView", "SlotItem", "DroppedItem",
]
