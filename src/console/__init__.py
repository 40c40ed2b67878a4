from .app import BananaConsole
from .widgets import ConsolePanel, RichLogHandler

__all__ = ["BananaConsole", "ConsolePanel", "RichLogHandler"]
