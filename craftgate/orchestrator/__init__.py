"""
Orchestrator package.

Builds runtime commands from the server type registry, runs them and turns
the outcome into an ApiResult:

    from craftgate.orchestrator import CommandBuilder, default_registry
"""

from .commands import Command, CommandBuilder, CreateParams
from .errors import (
    BuildError,
    CommandTimeoutError,
    ExecutionFailure,
    GatewayError,
    SpawnError,
    UnknownTypeError,
    ValidationError,
)
from .executor import CommandExecutor, ExecutionOutcome
from .locks import ContainerLocks
from .normalizer import ResponseNormalizer
from .registry import ConfigRegistry, Protocol, ServerTypeConfig, default_registry

__all__ = [
    "BuildError",
    "Command",
    "CommandBuilder",
    "CommandExecutor",
    "CommandTimeoutError",
    "ConfigRegistry",
    "ContainerLocks",
    "CreateParams",
    "ExecutionFailure",
    "ExecutionOutcome",
    "GatewayError",
    "Protocol",
    "ResponseNormalizer",
    "ServerTypeConfig",
    "SpawnError",
    "UnknownTypeError",
    "ValidationError",
    "default_registry",
]
