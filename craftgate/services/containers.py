from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Set

from ..orchestrator import (
    Command,
    CommandBuilder,
    CommandExecutor,
    ConfigRegistry,
    ContainerLocks,
    CreateParams,
    ResponseNormalizer,
)
from ..schemas import ApiResult, ServerTypeInfo

log = logging.getLogger(__name__)


class ContainerService:
    """
    Stateless dispatch of lifecycle operations to the container runtime.

    Nothing about containers is remembered here; `list_containers` asks the
    runtime every time. Operations that mutate a container are serialized per
    identifier and, once started, are never abandoned because the HTTP caller
    went away.
    """

    def __init__(
        self,
        registry: ConfigRegistry,
        builder: CommandBuilder,
        executor: CommandExecutor,
        normalizer: Optional[ResponseNormalizer] = None,
        locks: Optional[ContainerLocks] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.registry = registry
        self.builder = builder
        self.executor = executor
        self.normalizer = normalizer or ResponseNormalizer()
        self.locks = locks or ContainerLocks()
        self.timeout = timeout
        self._inflight: Set[asyncio.Task] = set()

    def server_types(self) -> List[ServerTypeInfo]:
        return [
            ServerTypeInfo(
                type=key,
                image=config.image,
                container_port=config.container_port,
                protocol=config.protocol.value,
                description=config.description,
            )
            for key, config in self.registry.items()
        ]

    def render_create(self, server_type: str, name: str, port: int) -> Command:
        """Resolve a create command without running it."""
        config = self.registry.lookup(server_type)
        return self.builder.build(config, CreateParams(name=name, host_port=port))

    async def list_containers(self) -> ApiResult:
        command = self.builder.build_listing(self.registry)
        outcome = await self.executor.run(command, self.timeout)
        return self.normalizer.normalize(command, outcome)

    async def create(self, server_type: str, name: str, port: int) -> ApiResult:
        # Raises UnknownTypeError / ValidationError before anything runs.
        command = self.render_create(server_type, name, port)
        return await self._dispatch(name, command)

    async def stop(self, container_id: str) -> ApiResult:
        return await self._control("stop", container_id)

    async def start(self, container_id: str) -> ApiResult:
        return await self._control("start", container_id)

    async def restart(self, container_id: str) -> ApiResult:
        return await self._control("restart", container_id)

    async def remove(self, container_id: str) -> ApiResult:
        return await self._control("remove", container_id)

    async def _control(self, action: str, container_id: str) -> ApiResult:
        command = self.builder.build_control(action, container_id)
        return await self._dispatch(container_id, command)

    async def _dispatch(self, identifier: str, command: Command) -> ApiResult:
        async def _job() -> ApiResult:
            async with self.locks.hold(identifier):
                outcome = await self.executor.run(command, self.timeout)
            return self.normalizer.normalize(command, outcome)

        task = asyncio.ensure_future(_job())
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            log.warning(
                "Caller went away; %s keeps running in the background", command.describe()
            )
            raise

    async def drain(self) -> None:
        """Wait for commands whose callers disconnected."""
        if self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)
