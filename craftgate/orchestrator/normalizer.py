"""Maps execution outcomes onto the API result shape."""

from __future__ import annotations

import logging

from ..schemas import ApiResult
from .commands import Command
from .errors import GatewayError
from .executor import ExecutionOutcome

log = logging.getLogger(__name__)


class ResponseNormalizer:
    def normalize(self, command: Command, outcome: ExecutionOutcome) -> ApiResult:
        description = command.describe()
        stdout = outcome.stdout.strip()
        stderr = outcome.stderr.strip()
        error = outcome.as_error()

        if error is None:
            # docker reports progress on stderr even when it succeeds
            if stderr and command.args[:1] != ("ps",):
                log.info("Docker status (via stderr): %s", stderr)
            return ApiResult(success=True, command=description, stdout=stdout, stderr=stderr)

        log.error("Error executing %s: %s", description, error)
        return ApiResult(
            success=False,
            command=description,
            stdout=stdout,
            stderr=stderr,
            message=str(error),
        )

    def reject(self, error: GatewayError) -> ApiResult:
        """Result for a request refused before any command was built."""
        return ApiResult(success=False, message=str(error))
