import dataclasses

import pytest

from craftgate.orchestrator import (
    BuildError,
    ConfigRegistry,
    Protocol,
    ServerTypeConfig,
    UnknownTypeError,
    default_registry,
)
from craftgate.orchestrator.registry import BEDROCK_EDITION, JAVA_EDITION


def _config(**overrides):
    values = dict(
        key="test-server",
        image="example/test-server",
        container_port=7777,
        protocol=Protocol.UDP,
        template=("run", "--name", "{name}", "-p", "{host_port}:{container_port}", "{image}"),
    )
    values.update(overrides)
    return ServerTypeConfig(**values)


def test_default_registry_has_java_and_bedrock():
    registry = default_registry()

    assert registry.types() == ["minecraft-java", "minecraft-bedrock"]
    java = registry.lookup("minecraft-java")
    assert (java.image, java.container_port, java.protocol) == (
        "itzg/minecraft-server",
        25565,
        Protocol.TCP,
    )
    bedrock = registry.lookup("minecraft-bedrock")
    assert (bedrock.image, bedrock.container_port, bedrock.protocol) == (
        "itzg/minecraft-bedrock-server",
        19132,
        Protocol.UDP,
    )


@pytest.mark.parametrize("server_type", ["foo", "", "MINECRAFT-JAVA", None])
def test_lookup_unknown_type(server_type):
    with pytest.raises(UnknownTypeError):
        default_registry().lookup(server_type)


def test_unknown_type_is_a_lookup_error():
    with pytest.raises(LookupError, match="foo"):
        default_registry().lookup("foo")


def test_registry_is_read_only():
    registry = default_registry()

    with pytest.raises(TypeError):
        registry._configs["minecraft-java"] = BEDROCK_EDITION
    with pytest.raises(dataclasses.FrozenInstanceError):
        JAVA_EDITION.image = "evil/image"


def test_template_lists_are_frozen_to_tuples():
    config = _config(template=["run", "--name", "{name}", "-p", "{host_port}:7777", "{image}"])
    assert isinstance(config.template, tuple)


def test_new_type_can_be_added_without_code_changes():
    registry = ConfigRegistry([JAVA_EDITION, _config()])

    assert "test-server" in registry
    assert len(registry) == 2
    assert registry.images() == ["itzg/minecraft-server", "example/test-server"]


def test_images_are_deduplicated():
    registry = ConfigRegistry([_config(), _config(key="test-server-2")])
    assert registry.images() == ["example/test-server"]


def test_duplicate_keys_rejected():
    with pytest.raises(BuildError, match="Duplicate"):
        ConfigRegistry([JAVA_EDITION, JAVA_EDITION])


@pytest.mark.parametrize("port", [0, 65536])
def test_container_port_range_checked(port):
    with pytest.raises(BuildError):
        _config(container_port=port)


def test_defective_template_fails_at_construction():
    with pytest.raises(BuildError, match="unknown placeholder"):
        ConfigRegistry([_config(template=("run", "{name}", "{host_port}", "{volume}"))])

    with pytest.raises(BuildError, match="exactly once"):
        ConfigRegistry([_config(template=("run", "{name}", "{image}"))])
