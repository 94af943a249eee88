"""Runtime engine exports."""

from .commands import RuntimeCommandDispatcher
from .loop import RuntimeBootstrap, RuntimeEngine, RuntimeHooks

__all__ = ["RuntimeBootstrap", "RuntimeCommandDispatcher", "RuntimeEngine", "RuntimeHooks"]
