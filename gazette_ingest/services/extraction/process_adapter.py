"""Time-bounded invocation of an external extraction program.

The program is started from an argument vector (never through a shell), its
stdout is parsed as JSON and validated against a pydantic model. Any failure
is raised as one of the typed ``AdapterError`` subclasses; the adapter itself
never touches the database or sends notifications.
"""

import asyncio
import json
import os
import signal
import time
from typing import ClassVar, Generic, List, Sequence, Tuple, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from gazette_ingest.core.exceptions import (
    AdapterContractViolationError,
    AdapterEmptyOutputError,
    AdapterMalformedJSONError,
    AdapterProcessError,
    AdapterTimeoutError,
)
from gazette_ingest.utils.logging import get_logger

LOGGER = get_logger(__name__)

PayloadT = TypeVar("PayloadT", bound=BaseModel)

STDERR_EXCERPT_LENGTH = 500
STDOUT_LOG_LENGTH = 1000
MAX_REPORTED_VIOLATIONS = 5


def _excerpt(text: str, length: int) -> str:
    text = text.strip()
    return text if len(text) <= length else text[:length] + "..."


def _summarize_violations(error: PydanticValidationError) -> str:
    parts = []
    for item in error.errors()[:MAX_REPORTED_VIOLATIONS]:
        location = ".".join(str(part) for part in item["loc"]) or "<root>"
        parts.append(f"{location}: {item['msg']}")
    if error.error_count() > MAX_REPORTED_VIOLATIONS:
        parts.append(f"... {error.error_count() - MAX_REPORTED_VIOLATIONS} more")
    return "; ".join(parts)


class ExtractionProcessAdapter(Generic[PayloadT]):
    """Run one external program and return its validated JSON payload."""

    name: ClassVar[str] = "extraction program"
    payload_model: ClassVar[Type[BaseModel]]

    def __init__(self, command: Sequence[str], timeout: float):
        """
        Args:
            command: Executable and fixed leading arguments (e.g. interpreter and script)
            timeout: Wall-clock budget for a single call, in seconds
        """
        self.command: List[str] = [str(part) for part in command]
        self.timeout = timeout

    async def invoke(self, *args: str) -> PayloadT:
        """Run the program with ``args`` appended to the command.

        Raises:
            AdapterTimeoutError: The call exceeded its time budget
            AdapterProcessError: The program could not start or exited non-zero
            AdapterEmptyOutputError: Nothing was written to stdout
            AdapterMalformedJSONError: Stdout is not JSON
            AdapterContractViolationError: The JSON does not match ``payload_model``
        """
        argv = self.command + [str(arg) for arg in args]
        start = time.monotonic()

        LOGGER.info(f"Executing {self.name}", extra={"argv": argv, "timeout": self.timeout})
        stdout, stderr, exit_code = await self._run(argv)
        duration = time.monotonic() - start

        if exit_code != 0:
            excerpt = _excerpt(stderr, STDERR_EXCERPT_LENGTH)
            LOGGER.error(
                f"{self.name} failed with exit code {exit_code}: {excerpt}",
                extra={"argv": argv, "stdout": _excerpt(stdout, STDOUT_LOG_LENGTH)},
            )
            raise AdapterProcessError(self.name, exit_code, excerpt)

        payload = self.parse(stdout, stderr)
        LOGGER.info(
            f"{self.name} completed in {duration:.2f}s",
            extra={"argv": argv, "duration_seconds": duration},
        )
        return payload

    def parse(self, stdout: str, stderr: str = "") -> PayloadT:
        """Parse and validate captured stdout."""
        if not stdout or not stdout.strip():
            LOGGER.error(
                f"{self.name} returned empty output",
                extra={"stderr": _excerpt(stderr, STDERR_EXCERPT_LENGTH)},
            )
            raise AdapterEmptyOutputError(self.name)

        try:
            data = json.loads(stdout)
        except json.JSONDecodeError as e:
            LOGGER.error(
                f"Failed to parse {self.name} output as JSON: {e}",
                extra={
                    "stdout": _excerpt(stdout, STDOUT_LOG_LENGTH),
                    "stderr": _excerpt(stderr, STDERR_EXCERPT_LENGTH),
                },
            )
            raise AdapterMalformedJSONError(self.name, str(e), original_error=e) from e

        try:
            return self.payload_model.model_validate(data)
        except PydanticValidationError as e:
            detail = _summarize_violations(e)
            LOGGER.error(
                f"Invalid JSON structure from {self.name}: {detail}",
                extra={"stdout": _excerpt(stdout, STDOUT_LOG_LENGTH)},
            )
            raise AdapterContractViolationError(self.name, detail, original_error=e) from e

    async def _run(self, argv: List[str]) -> Tuple[str, str, int]:
        """Start the process and collect its output within the time budget.

        The process (and its process group on POSIX) is killed and reaped if the
        budget expires or the calling task is cancelled.
        """
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=os.name == "posix",
            )
        except OSError as e:
            LOGGER.error(f"Could not start {self.name}: {e}", extra={"argv": argv})
            raise AdapterProcessError(self.name, None, str(e)) from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            LOGGER.error(
                f"{self.name} timed out after {self.timeout:g}s",
                extra={"argv": argv, "pid": process.pid},
            )
            raise AdapterTimeoutError(self.name, self.timeout) from None
        finally:
            if process.returncode is None:
                await self._terminate(process)

        return (
            stdout.decode("utf-8", errors="replace"),
            stderr.decode("utf-8", errors="replace"),
            process.returncode,
        )

    async def _terminate(self, process: asyncio.subprocess.Process) -> None:
        try:
            if os.name == "posix":
                os.killpg(process.pid, signal.SIGKILL)
            else:
                process.kill()
        except ProcessLookupError:
            pass
        await process.wait()
        LOGGER.warning(f"Killed {self.name} process {process.pid}")
