"""Subversion client.

Wraps the ``svn`` command line client. Every call runs one subprocess and
waits for it; callers sequence calls themselves.
"""

import asyncio
import re
from typing import Protocol, Sequence

from svntag.config import settings
from svntag.core.exceptions import VcsCommunicationError, VcsOperationError
from svntag.utils.logging import get_logger

# Error codes meaning the server could not be reached or refused us
COMMUNICATION_ERROR_CODES = frozenset(
    {
        "E000110",  # connection timed out
        "E000111",  # connection refused
        "E000113",  # no route to host
        "E120108",  # connection closed unexpectedly
        "E170001",  # authorization failed
        "E170013",  # unable to connect
        "E175002",  # request failed
        "E175012",  # connection timed out
        "E215004",  # authentication failed
        "E230001",  # server certificate verification failed
        "E670002",  # name or service not known
        "E670008",  # nodename nor servname provided
        "E731001",  # host unknown
    }
)

# Codes meaning the URL does not exist
NOT_FOUND_CODES = frozenset({"W170000", "E170000", "E160013", "E200009"})

# Codes meaning the path is already there
ALREADY_EXISTS_CODES = frozenset({"E160020", "E125002", "E150002"})

_ERROR_CODE = re.compile(r"\b([EW]\d{6})\b")


def error_codes(output: str) -> set[str]:
    """Extract svn error codes from command output."""
    return set(_ERROR_CODE.findall(output))


class VcsClient(Protocol):
    """Operations the tag executor needs from a version control client."""

    async def exists(self, url: str) -> bool: ...

    async def copy(
        self, source: str, destination: str, comment: str, revision: int | None = None
    ) -> str: ...

    async def delete(self, url: str, comment: str) -> str: ...

    async def mkdir(self, url: str, comment: str) -> str: ...


class SvnClient:
    """``svn`` command line implementation of ``VcsClient``."""

    def __init__(
        self,
        binary: str | None = None,
        timeout: float | None = None,
        extra_args: Sequence[str] | None = None,
    ):
        self.binary = binary or settings.svn_binary
        self.timeout = timeout if timeout is not None else settings.svn_timeout_seconds
        self.extra_args = list(extra_args if extra_args is not None else settings.svn_extra_args)
        self.logger = get_logger("svn")

    async def exists(self, url: str) -> bool:
        """Check whether ``url`` exists in the repository.

        Raises:
            VcsCommunicationError: if existence cannot be determined
        """
        returncode, output = await self._run("info", [url])
        if returncode == 0:
            return True

        codes = error_codes(output)
        if codes & COMMUNICATION_ERROR_CODES or not codes & NOT_FOUND_CODES:
            raise VcsCommunicationError(f"Cannot determine whether {url} exists", output)
        return False

    async def copy(
        self, source: str, destination: str, comment: str, revision: int | None = None
    ) -> str:
        """Server-side copy of ``source`` (at ``revision``) to ``destination``."""
        args = ["-m", comment]
        if revision is not None:
            args += ["-r", str(revision)]
        args += [source, destination]
        return await self._mutate("copy", destination, args)

    async def delete(self, url: str, comment: str) -> str:
        """Delete ``url`` in a single commit."""
        return await self._mutate("delete", url, ["-m", comment, url])

    async def mkdir(self, url: str, comment: str) -> str:
        """Create ``url`` and any missing parents; an existing directory is fine."""
        try:
            return await self._mutate("mkdir", url, ["--parents", "-m", comment, url])
        except VcsOperationError as e:
            if error_codes(e.output) & ALREADY_EXISTS_CODES or "already exists" in e.output:
                self.logger.info("svn.mkdir.already_exists", url=url)
                return e.output
            raise

    async def _mutate(self, command: str, url: str, args: list[str]) -> str:
        returncode, output = await self._run(command, args)
        if returncode == 0:
            return output

        if error_codes(output) & COMMUNICATION_ERROR_CODES:
            raise VcsCommunicationError(f"svn {command} could not reach the server for {url}", output)
        raise VcsOperationError(command, url, output, returncode)

    async def _run(self, command: str, args: list[str]) -> tuple[int, str]:
        """Run one svn command and return its exit status and combined output."""
        cmd = [self.binary, command, "--non-interactive", *self.extra_args, *args]
        self.logger.info("svn.command.started", command=command, args=args)

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise VcsCommunicationError(f"Cannot run {self.binary}: {e}") from e
        except ValueError as e:
            # Arguments the OS refuses, e.g. a NUL byte in a resolved comment
            raise VcsOperationError(command, args[-1], str(e)) from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            await self._kill(process)
            self.logger.error("svn.command.timeout", command=command, timeout=self.timeout)
            raise VcsCommunicationError(
                f"svn {command} timed out after {self.timeout:g} seconds"
            ) from None
        except asyncio.CancelledError:
            await self._kill(process)
            self.logger.warning("svn.command.cancelled", command=command, args=args)
            raise

        stdout_text = stdout.decode(errors="replace") if stdout else ""
        stderr_text = stderr.decode(errors="replace") if stderr else ""
        output = "\n".join(part for part in (stdout_text.strip(), stderr_text.strip()) if part)

        if process.returncode != 0:
            self.logger.warning(
                "svn.command.failed",
                command=command,
                returncode=process.returncode,
                error_preview=stderr_text[:500],
            )
        else:
            self.logger.debug("svn.command.completed", command=command)

        return process.returncode, output

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        """Kill a running svn process and reap it."""
        try:
            process.kill()
        except ProcessLookupError:
            pass
        await process.wait()
