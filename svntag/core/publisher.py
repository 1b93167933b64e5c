"""Tag publisher.

Entry point invoked after a build's result is final. Resolves every target
first, then tags module by module, then reports. Failures are reported in
the returned outcome and never raised to the caller.
"""

import asyncio
from typing import Mapping, Sequence

from svntag.core.aggregator import aggregate, format_report
from svntag.core.config_store import ConfigStore, get_config_store
from svntag.core.environment import build_environment
from svntag.core.exceptions import PathResolutionError, SvnTagError, TemplateError
from svntag.core.executor import ABORTED_MESSAGE, TagExecutor
from svntag.core.paths import build_targets
from svntag.core.template import resolve
from svntag.models.build import BuildContext
from svntag.models.tag import (
    ModuleDescriptor,
    ResolvedComments,
    ResolvedTagTarget,
    TaggingOutcome,
    TagRequest,
)
from svntag.utils.logging import get_logger
from svntag.vcs.client import SvnClient, VcsClient


def resolve_targets(
    request: TagRequest,
    env: Mapping[str, str],
    modules: Sequence[ModuleDescriptor],
) -> list[ResolvedTagTarget]:
    """Expand templates and compute every module's destination.

    Raises:
        TemplateError: if any template is malformed or unresolvable
        PathResolutionError: if any module cannot be mapped to a destination
    """
    base_url = resolve(request.base_url_template, env)
    comments = ResolvedComments(
        tag_comment=resolve(request.tag_comment, env),
        mkdir_comment=resolve(request.mkdir_comment, env),
        delete_comment=resolve(request.delete_comment, env),
    )
    return build_targets(base_url, modules, comments)


class TagPublisher:
    """Creates Subversion tags for a finished build."""

    def __init__(
        self,
        client: VcsClient | None = None,
        store: ConfigStore | None = None,
    ):
        self.client = client or SvnClient()
        self._store = store
        self.executor = TagExecutor(self.client)
        self.logger = get_logger("publisher")

    @property
    def store(self) -> ConfigStore:
        if self._store is None:
            self._store = get_config_store()
        return self._store

    async def run(
        self,
        request: TagRequest,
        env: Mapping[str, str],
        modules: Sequence[ModuleDescriptor],
        cancel_event: asyncio.Event | None = None,
    ) -> TaggingOutcome:
        """Tag all modules of a build.

        Args:
            request: Templates for this run
            env: Build variables the templates are expanded against
            modules: Modules that took part in the build
            cancel_event: Set to stop before the next module

        Returns:
            The aggregated outcome with its build log report
        """
        self.logger.info("publisher.run.started", modules=len(modules))

        try:
            targets = resolve_targets(request, env, modules)
        except (TemplateError, PathResolutionError) as e:
            self.logger.error(
                "publisher.run.resolution_failed",
                error=e.message,
                error_type=type(e).__name__,
            )
            return TaggingOutcome(
                overall_success=False,
                report=format_report([], error=e.message),
                error=e.message,
            )

        results = await self.executor.run(targets, cancel_event)
        overall_success = aggregate(results)
        aborted = any(r.diagnostic_output == ABORTED_MESSAGE for r in results)

        self.logger.info(
            "publisher.run.completed",
            overall_success=overall_success,
            tagged=sum(1 for r in results if r.succeeded),
            total=len(results),
            aborted=aborted,
        )

        return TaggingOutcome(
            overall_success=overall_success,
            results=results,
            report=format_report(results),
            aborted=aborted,
        )

    async def publish(
        self,
        context: BuildContext,
        cancel_event: asyncio.Event | None = None,
    ) -> TaggingOutcome:
        """Tag a build using the stored configuration for its job."""
        try:
            request = await self.store.effective_request(context.job_name)
        except SvnTagError as e:
            self.logger.error("publisher.config_unavailable", error=e.message)
            return TaggingOutcome(
                overall_success=False,
                report=format_report([], error=e.message),
                error=e.message,
            )

        if context.overrides is not None:
            request = context.overrides.with_defaults(request)

        env = build_environment(
            context.job_name,
            context.build_number,
            context.build_tag,
            context.variables,
        )
        return await self.run(request, env, context.modules, cancel_event)


async def run_tagging(
    request: TagRequest,
    env: Mapping[str, str],
    modules: Sequence[ModuleDescriptor],
    client: VcsClient | None = None,
) -> TaggingOutcome:
    """Tag a build with an explicit request and environment."""
    publisher = TagPublisher(client=client)
    return await publisher.run(request, env, modules)
