"""Tag executor.

Runs check -> (delete) -> (mkdir) -> copy for each resolved target, one
module after another.
"""

import asyncio
from typing import Awaitable, Sequence, TypeVar

from svntag.core.exceptions import VcsCommunicationError, VcsOperationError
from svntag.core.paths import parent_url
from svntag.models.tag import (
    ModuleState,
    ResolvedTagTarget,
    TagOperationResult,
    VcsCall,
)
from svntag.utils.logging import get_logger
from svntag.vcs.client import VcsClient

T = TypeVar("T")

ABORTED_MESSAGE = "Tagging aborted before this module was processed"


class TagExecutor:
    """Creates tags for resolved targets.

    Modules are independent: a failure of any kind marks that module
    ``FAILED`` and the executor moves on. Within a module the first failing VCS call stops the
    sequence. Nothing is retried.
    """

    def __init__(self, client: VcsClient):
        self.client = client
        self.logger = get_logger("executor")

    async def run(
        self,
        targets: Sequence[ResolvedTagTarget],
        cancel_event: asyncio.Event | None = None,
    ) -> list[TagOperationResult]:
        """Tag every target in order.

        Args:
            targets: Fully resolved targets
            cancel_event: When set, modules not yet started are skipped.
                A module already in progress always runs to completion.

        Returns:
            One result per target, in the same order
        """
        results: list[TagOperationResult] = []

        for target in targets:
            if cancel_event is not None and cancel_event.is_set():
                self.logger.warning(
                    "executor.module.aborted",
                    destination=target.destination_url,
                )
                results.append(
                    TagOperationResult(
                        module=target.module,
                        target=target,
                        state=ModuleState.FAILED,
                        diagnostic_output=ABORTED_MESSAGE,
                    )
                )
                continue

            results.append(await self.tag_module(target))

        return results

    async def tag_module(self, target: ResolvedTagTarget) -> TagOperationResult:
        """Run the tagging sequence for one module."""
        result = TagOperationResult(module=target.module, target=target)
        destination = target.destination_url

        self.logger.info(
            "executor.module.started",
            source=target.source_url,
            destination=destination,
            revision=target.revision,
        )

        try:
            exists = await self._invoke(result, "info", destination, self.client.exists(destination))
            result.state = ModuleState.CHECKED

            if exists:
                await self._invoke(
                    result,
                    "delete",
                    destination,
                    self.client.delete(destination, target.delete_comment),
                )
                result.state = ModuleState.DELETED
            else:
                await self._ensure_parent(result, target)

            output = await self._invoke(
                result,
                "copy",
                destination,
                self.client.copy(
                    target.source_url,
                    destination,
                    target.tag_comment,
                    target.revision,
                ),
            )
        except (VcsOperationError, VcsCommunicationError) as e:
            result.state = ModuleState.FAILED
            result.succeeded = False
            result.diagnostic_output = "\n".join(p for p in (e.message, e.output) if p)
            self.logger.error(
                "executor.module.failed",
                destination=destination,
                error=e.message,
                error_type=type(e).__name__,
            )
            return result
        except Exception as e:
            # Any other failure still only fails this module
            result.state = ModuleState.FAILED
            result.succeeded = False
            result.diagnostic_output = f"{type(e).__name__}: {e}"
            self.logger.error(
                "executor.module.crashed",
                destination=destination,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
            return result

        result.state = ModuleState.TAGGED
        result.succeeded = True
        result.diagnostic_output = output
        self.logger.info("executor.module.tagged", destination=destination)
        return result

    async def _ensure_parent(self, result: TagOperationResult, target: ResolvedTagTarget) -> None:
        """Create the destination's parent directory when it is missing."""
        parent = parent_url(target.destination_url)
        if parent is None:
            return

        if await self._invoke(result, "info", parent, self.client.exists(parent)):
            return

        await self._invoke(
            result,
            "mkdir",
            parent,
            self.client.mkdir(parent, target.mkdir_comment),
        )

    async def _invoke(
        self,
        result: TagOperationResult,
        operation: str,
        url: str,
        call: Awaitable[T],
    ) -> T:
        """Await a client call and record it on the module's result."""
        try:
            value = await call
        except (VcsOperationError, VcsCommunicationError) as e:
            result.calls.append(VcsCall(operation=operation, url=url, ok=False, output=e.output))
            raise

        result.calls.append(
            VcsCall(
                operation=operation,
                url=url,
                ok=True,
                output=value if isinstance(value, str) else "",
            )
        )
        return value
