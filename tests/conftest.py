"""
Shared fixtures: an in-memory stand-in for the docker CLI plus the
service/app wired around it.
"""
import asyncio
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from craftgate.config import Settings
from craftgate.main import create_app
from craftgate.orchestrator import (
    Command,
    CommandBuilder,
    CommandExecutor,
    ExecutionOutcome,
    default_registry,
)
from craftgate.services import ContainerService


class FakeRuntime(CommandExecutor):
    """
    Interprets docker argv tuples against an in-memory container table.

    Only the verbs the gateway issues are understood: run, ps, stop, start,
    restart and rm.
    """

    def __init__(self, delay: float = 0.0) -> None:
        super().__init__(default_timeout=5)
        self.delay = delay
        self.calls: List[Command] = []
        self.completed: List[Command] = []
        self.containers: Dict[str, Dict[str, str]] = {}
        self.running_now = 0
        self.max_parallel = 0

    async def run(self, command: Command, timeout: Optional[float] = None) -> ExecutionOutcome:
        self.calls.append(command)
        self.running_now += 1
        self.max_parallel = max(self.max_parallel, self.running_now)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            code, out, err = self._dispatch(list(command.args))
        finally:
            self.running_now -= 1
        self.completed.append(command)
        return ExecutionOutcome(exited_normally=True, exit_code=code, stdout=out, stderr=err)

    def _dispatch(self, args: List[str]):
        verb, rest = args[0], args[1:]
        if verb == "run":
            name = rest[rest.index("--name") + 1]
            if name in self.containers:
                return 125, "", (
                    "docker: Error response from daemon: Conflict. The container name "
                    f'"/{name}" is already in use.\n'
                )
            self.containers[name] = {"image": rest[-1], "status": "running"}
            return 0, f"{name}-0123456789abcdef\n", ""
        if verb == "ps":
            images = [a.split("=", 1)[1] for a in rest if a.startswith("ancestor=")]
            lines = ["CONTAINER ID   IMAGE   STATUS   NAMES"]
            for name, info in self.containers.items():
                if not images or info["image"] in images:
                    lines.append(f"{name[:12]}   {info['image']}   {info['status']}   {name}")
            return 0, "\n".join(lines) + "\n", ""
        if verb == "rm":
            name = rest[-1]
            if self.containers.pop(name, None) is None:
                return 1, "", f"Error response from daemon: No such container: {name}\n"
            return 0, f"{name}\n", ""

        name = rest[-1]
        info = self.containers.get(name)
        if info is None:
            return 1, "", f"Error response from daemon: No such container: {name}\n"
        if verb == "stop":
            if info["status"] != "running":
                return 1, "", f"Error response from daemon: container {name} is not running\n"
            info["status"] = "exited"
        elif verb in ("start", "restart"):
            info["status"] = "running"
        else:
            return 125, "", f"unknown command: docker {verb}\n"
        return 0, f"{name}\n", ""


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def builder():
    return CommandBuilder("docker")


@pytest.fixture
def fake_runtime():
    return FakeRuntime()


@pytest.fixture
def service(registry, builder, fake_runtime):
    return ContainerService(registry=registry, builder=builder, executor=fake_runtime)


@pytest.fixture
def client(service, tmp_path):
    (tmp_path / "index.html").write_text("<h1>Craft Gate</h1>")
    app = create_app(Settings(static_dir=tmp_path), service=service)
    return TestClient(app)
