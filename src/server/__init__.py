"""Control page and websocket event stream for the study timer."""

from .config import ServerConfigurationError, UIServerConfig
from .events import CommandDecodeError
from .service import UIServer

__all__ = [
    "CommandDecodeError",
    "ServerConfigurationError",
    "UIServer",
    "UIServerConfig",
]
