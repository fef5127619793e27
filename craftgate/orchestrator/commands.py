"""
Command construction.

Templates are tuples of argument segments. A segment may contain
``{placeholder}`` fields; each segment always resolves to exactly one argument,
so a caller-supplied value can never split into extra runtime arguments. No
shell is involved at any point: the result is an argv tuple that the executor
hands straight to the runtime binary.
"""

from __future__ import annotations

import re
import shlex
import string
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Mapping, Tuple

from .errors import BuildError, ValidationError
from .registry import MAX_PORT, MIN_PORT, ConfigRegistry, ServerTypeConfig

EULA_ACCEPTED = "EULA=TRUE"

PLACEHOLDERS = frozenset(
    {"name", "host_port", "container_port", "protocol_suffix", "eula", "image"}
)
# Placeholders filled from the request; each must appear exactly once.
CALLER_PLACEHOLDERS = ("name", "host_port")

# Docker's own rule for container names (two characters minimum), with a
# length cap. IDs may be one-character short prefixes.
_NAME_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9_.-]+")
_IDENTIFIER_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9_.-]*")
MAX_IDENTIFIER_LENGTH = 128

CONTROL_ACTIONS: Mapping[str, Tuple[str, ...]] = {
    "stop": ("stop",),
    "start": ("start",),
    "restart": ("restart",),
    "remove": ("rm", "-f"),
}

_formatter = string.Formatter()


@dataclass(frozen=True)
class Command:
    argv: Tuple[str, ...]

    @property
    def binary(self) -> str:
        return self.argv[0]

    @property
    def args(self) -> Tuple[str, ...]:
        return self.argv[1:]

    def describe(self) -> str:
        """Shell-quoted echo of the argv, for logs and API results only."""
        return shlex.join(self.argv)

    def __str__(self) -> str:
        return self.describe()


@dataclass(frozen=True)
class CreateParams:
    name: str
    host_port: int


def validate_port(value: object, label: str = "host port") -> int:
    # bool is an int subclass; True must not become port 1.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"Invalid {label} number specified: {value!r}")
    if not MIN_PORT <= value <= MAX_PORT:
        raise ValidationError(
            f"Invalid {label} number specified: {value} (expected {MIN_PORT}-{MAX_PORT})"
        )
    return value


def validate_identifier(
    value: object, label: str = "container ID", pattern: re.Pattern = _IDENTIFIER_RE
) -> str:
    if not isinstance(value, str) or not value:
        raise ValidationError(f"{label.capitalize()} is required.")
    if len(value) > MAX_IDENTIFIER_LENGTH:
        raise ValidationError(f"{label.capitalize()} is too long (max {MAX_IDENTIFIER_LENGTH}).")
    if not pattern.fullmatch(value):
        raise ValidationError(
            f"{label.capitalize()} {value!r} may only contain letters, digits, '_', '.' "
            "and '-', and must start with a letter or digit."
        )
    return value


def validate_name(value: object) -> str:
    if isinstance(value, str) and len(value) == 1:
        raise ValidationError("Container name must be at least 2 characters long.")
    return validate_identifier(value, label="container name", pattern=_NAME_RE)


def _parse_segment(segment: str) -> List[Tuple[str, str | None]]:
    try:
        parsed = list(_formatter.parse(segment))
    except ValueError as exc:
        raise BuildError(f"Malformed template segment {segment!r}: {exc}") from exc

    parts: List[Tuple[str, str | None]] = []
    for literal, field, spec, conversion in parsed:
        if field is not None and (spec or conversion):
            raise BuildError(f"Format specs are not supported in template segment {segment!r}")
        parts.append((literal, field))
    return parts


def template_fields(template: Tuple[str, ...]) -> Counter:
    """Count placeholder occurrences across all template segments."""
    counts: Counter = Counter()
    for segment in template:
        for _, field in _parse_segment(segment):
            if field is not None:
                counts[field] += 1
    return counts


def check_template(config: ServerTypeConfig) -> None:
    """Raise BuildError if the template cannot be filled exactly."""
    if not config.template:
        raise BuildError(f"{config.key}: template is empty")
    counts = template_fields(config.template)
    unknown = sorted(set(counts) - PLACEHOLDERS)
    if unknown:
        raise BuildError(f"{config.key}: unknown placeholder(s) {', '.join(unknown)}")
    for field in CALLER_PLACEHOLDERS:
        if counts[field] != 1:
            raise BuildError(
                f"{config.key}: placeholder {{{field}}} must appear exactly once, "
                f"found {counts[field]}"
            )


def render_segment(segment: str, values: Mapping[str, str]) -> str:
    rendered = []
    for literal, field in _parse_segment(segment):
        rendered.append(literal)
        if field is None:
            continue
        if field not in values:
            raise BuildError(f"No value for placeholder {{{field}}} in {segment!r}")
        rendered.append(values[field])
    return "".join(rendered)


class CommandBuilder:
    """Turns registry entries and request parameters into runtime argv tuples."""

    def __init__(self, binary: str = "docker") -> None:
        if not binary:
            raise BuildError("Runtime binary must not be empty")
        self.binary = binary

    def build(self, config: ServerTypeConfig, params: CreateParams) -> Command:
        name = validate_name(params.name)
        host_port = validate_port(params.host_port)
        check_template(config)

        values: Dict[str, str] = {
            "name": name,
            "host_port": str(host_port),
            "container_port": str(config.container_port),
            "protocol_suffix": config.protocol.suffix,
            "eula": EULA_ACCEPTED,
            "image": config.image,
        }
        args = tuple(render_segment(segment, values) for segment in config.template)
        return Command((self.binary, *args))

    def build_control(self, action: str, container_id: str) -> Command:
        try:
            verb = CONTROL_ACTIONS[action]
        except KeyError:
            raise BuildError(f"Unknown container action: {action!r}") from None
        container_id = validate_identifier(container_id)
        return Command((self.binary, *verb, container_id))

    def build_listing(self, registry: ConfigRegistry) -> Command:
        args: List[str] = ["ps", "-a"]
        for image in registry.images():
            args.extend(["--filter", f"ancestor={image}"])
        return Command((self.binary, *args))
