"""
Server type registry.

Each supported game server is described by a ``ServerTypeConfig``: the image
to run, the port it listens on inside the container, the protocol of that
port, and the argument template handed to the runtime binary. The registry is
built once at startup and is read-only afterwards.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Tuple

from .errors import BuildError, UnknownTypeError

MIN_PORT = 1
MAX_PORT = 65535


class Protocol(str, enum.Enum):
    TCP = "tcp"
    UDP = "udp"

    @property
    def suffix(self) -> str:
        return f"/{self.value}"


@dataclass(frozen=True)
class ServerTypeConfig:
    key: str
    image: str
    container_port: int
    protocol: Protocol
    template: Tuple[str, ...]
    description: str = ""

    def __post_init__(self) -> None:
        if not self.key:
            raise BuildError("Server type key must not be empty")
        if not self.image:
            raise BuildError(f"{self.key}: image must not be empty")
        if not MIN_PORT <= self.container_port <= MAX_PORT:
            raise BuildError(f"{self.key}: container port {self.container_port} out of range")
        # Lists are accepted for convenience but never stored.
        object.__setattr__(self, "template", tuple(self.template))
        object.__setattr__(self, "protocol", Protocol(self.protocol))


# Java edition listens on 25565/tcp; the port protocol is spelled out so the
# mapping is explicit in `docker ps` output.
JAVA_EDITION = ServerTypeConfig(
    key="minecraft-java",
    image="itzg/minecraft-server",
    container_port=25565,
    protocol=Protocol.TCP,
    template=(
        "run",
        "-d",
        "--name",
        "{name}",
        "-p",
        "{host_port}:{container_port}{protocol_suffix}",
        "-e",
        "{eula}",
        "{image}",
    ),
    description="Minecraft Java Edition",
)

BEDROCK_EDITION = ServerTypeConfig(
    key="minecraft-bedrock",
    image="itzg/minecraft-bedrock-server",
    container_port=19132,
    protocol=Protocol.UDP,
    template=(
        "run",
        "-d",
        "--name",
        "{name}",
        "-p",
        "{host_port}:{container_port}{protocol_suffix}",
        "-e",
        "{eula}",
        "-v",
        "mc-bedrock-data:/data",
        "{image}",
    ),
    description="Minecraft Bedrock Edition",
)

DEFAULT_SERVER_TYPES: Tuple[ServerTypeConfig, ...] = (JAVA_EDITION, BEDROCK_EDITION)


class ConfigRegistry:
    """Immutable mapping of server type key -> ServerTypeConfig."""

    def __init__(self, configs: Iterable[ServerTypeConfig]) -> None:
        # commands imports this module at load time.
        from .commands import check_template

        table: Dict[str, ServerTypeConfig] = {}
        for config in configs:
            if config.key in table:
                raise BuildError(f"Duplicate server type: {config.key}")
            check_template(config)
            table[config.key] = config
        self._configs: Mapping[str, ServerTypeConfig] = MappingProxyType(table)

    def lookup(self, server_type: str) -> ServerTypeConfig:
        try:
            return self._configs[server_type]
        except (KeyError, TypeError):
            raise UnknownTypeError(server_type) from None

    def types(self) -> List[str]:
        return list(self._configs)

    def images(self) -> List[str]:
        """Registered images in registration order, without duplicates."""
        return list(dict.fromkeys(config.image for config in self._configs.values()))

    def items(self):
        return self._configs.items()

    def __contains__(self, server_type: object) -> bool:
        return server_type in self._configs

    def __iter__(self) -> Iterator[str]:
        return iter(self._configs)

    def __len__(self) -> int:
        return len(self._configs)


def default_registry() -> ConfigRegistry:
    return ConfigRegistry(DEFAULT_SERVER_TYPES)
