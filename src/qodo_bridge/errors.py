"""Application-level exception types for qodo-bridge."""

from __future__ import annotations


class QodoBridgeError(Exception):
    """Base exception for qodo-bridge."""


class InitializationError(QodoBridgeError):
    """Raised when the shared CLI invoker could not be constructed."""


class InvocationError(QodoBridgeError):
    """Raised when a failed invocation result is unwrapped."""


class ToolNotFoundError(QodoBridgeError, KeyError):
    """Raised when a tool name is not registered."""


class UnknownConfigKeyError(QodoBridgeError, KeyError):
    """Raised when a configuration key does not name a known setting."""
