"""Build system entry point."""

from fastapi import APIRouter

from svntag.api.deps import PublisherDep
from svntag.models.build import BuildContext, TagRunResponse

router = APIRouter()


@router.post(
    "",
    response_model=TagRunResponse,
    summary="Tag a finished build",
)
async def tag_build(context: BuildContext, publisher: PublisherDep) -> TagRunResponse:
    """Create tags for every module of a finished build.

    Always answers 200: a failed tagging run is reported in the outcome and
    does not change the build result.
    """
    outcome = await publisher.publish(context)
    return TagRunResponse(
        job_name=context.job_name,
        build_number=context.build_number,
        outcome=outcome,
    )
