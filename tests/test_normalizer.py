import logging

from craftgate.orchestrator import (
    Command,
    ExecutionOutcome,
    ResponseNormalizer,
    UnknownTypeError,
    ValidationError,
)

CREATE = Command(("docker", "run", "-d", "--name", "mc1", "itzg/minecraft-server"))
STOP = Command(("docker", "stop", "mc1"))


def test_success_trims_output():
    result = ResponseNormalizer().normalize(
        CREATE,
        ExecutionOutcome(exited_normally=True, exit_code=0, stdout="  abc123\n", stderr="\n"),
    )

    assert result.success
    assert result.stdout == "abc123"
    assert result.stderr == ""
    assert result.message is None
    assert result.command == "docker run -d --name mc1 itzg/minecraft-server"


def test_success_with_stderr_is_logged(caplog):
    with caplog.at_level(logging.INFO, logger="craftgate.orchestrator.normalizer"):
        result = ResponseNormalizer().normalize(
            CREATE,
            ExecutionOutcome(
                exited_normally=True, exit_code=0, stderr="Unable to find image locally\n"
            ),
        )

    assert result.success
    assert result.stderr == "Unable to find image locally"
    assert "Unable to find image locally" in caplog.text


def test_non_zero_exit_keeps_runtime_diagnostic_verbatim():
    stderr = "Error response from daemon: No such container: mc1"
    result = ResponseNormalizer().normalize(
        STOP, ExecutionOutcome(exited_normally=True, exit_code=1, stderr=stderr + "\n")
    )

    assert not result.success
    assert result.stderr == stderr
    assert result.message == "Docker command failed with exit code 1"
    assert result.command == "docker stop mc1"


def test_spawn_failure_message():
    result = ResponseNormalizer().normalize(
        STOP,
        ExecutionOutcome(
            exited_normally=False,
            exit_code=None,
            spawn_failed=True,
            spawn_error="[Errno 2] No such file or directory: 'docker'",
        ),
    )

    assert not result.success
    assert result.stderr == ""
    assert result.message.startswith("Container runtime could not be started")
    assert "No such file" in result.message


def test_timeout_message():
    result = ResponseNormalizer().normalize(
        STOP,
        ExecutionOutcome(exited_normally=False, exit_code=None, timed_out=True, timeout=30.0),
    )

    assert not result.success
    assert result.message == "Container runtime command timed out after 30s"


def test_signal_exit_is_failure():
    result = ResponseNormalizer().normalize(
        STOP, ExecutionOutcome(exited_normally=False, exit_code=-9)
    )
    assert not result.success
    assert "signal 9" in result.message


def test_reject_has_no_command():
    normalizer = ResponseNormalizer()

    result = normalizer.reject(UnknownTypeError("foo"))
    assert not result.success
    assert result.command == ""
    assert "foo" in result.message

    result = normalizer.reject(ValidationError("Invalid host port number specified: 70000"))
    assert result.message == "Invalid host port number specified: 70000"


def test_timeout_without_budget():
    result = ResponseNormalizer().normalize(
        Command(("docker", "ps")),
        ExecutionOutcome(exited_normally=False, exit_code=None, timed_out=True),
    )

    assert not result.success
    assert result.message == "Container runtime command timed out"
