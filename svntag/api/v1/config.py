"""Tagging configuration endpoints."""

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from svntag.api.deps import StoreDep
from svntag.core.validation import check_template
from svntag.models.tag import TagRequest

router = APIRouter()


class JobListResponse(BaseModel):
    """Jobs with stored overrides."""

    jobs: list[str]
    total: int


class JobConfigResponse(BaseModel):
    """A job's stored overrides and the request they produce."""

    job_name: str
    overrides: TagRequest
    effective: TagRequest


def _validate_request(request: TagRequest, require_base_url: bool) -> None:
    """Reject malformed templates with a 422 naming the field."""
    errors = {}
    for name in ("base_url_template", "tag_comment", "mkdir_comment", "delete_comment"):
        required = require_base_url and name == "base_url_template"
        result = check_template(getattr(request, name), required=required)
        if not result.ok:
            errors[name] = result.message

    if errors:
        raise HTTPException(status_code=422, detail=errors)


@router.get("/defaults", response_model=TagRequest, summary="Get global defaults")
async def get_defaults(store: StoreDep) -> TagRequest:
    """Return the global tagging defaults."""
    return await store.load()


@router.put("/defaults", response_model=TagRequest, summary="Replace global defaults")
async def put_defaults(request: TagRequest, store: StoreDep) -> TagRequest:
    """Validate and persist the global defaults."""
    _validate_request(request, require_base_url=True)
    return await store.save(request)


@router.get("/jobs", response_model=JobListResponse, summary="List configured jobs")
async def list_jobs(store: StoreDep) -> JobListResponse:
    """List jobs that override the defaults."""
    jobs = await store.list_jobs()
    return JobListResponse(jobs=jobs, total=len(jobs))


@router.get("/jobs/{job_name}", response_model=JobConfigResponse, summary="Get job configuration")
async def get_job(job_name: str, store: StoreDep) -> JobConfigResponse:
    """Return a job's overrides together with the effective request."""
    overrides = await store.get_job(job_name)
    if overrides is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No configuration for job: {job_name}",
        )
    return JobConfigResponse(
        job_name=job_name,
        overrides=overrides,
        effective=await store.effective_request(job_name),
    )


@router.put("/jobs/{job_name}", response_model=JobConfigResponse, summary="Save job configuration")
async def put_job(job_name: str, request: TagRequest, store: StoreDep) -> JobConfigResponse:
    """Store overrides for a job; blank fields inherit the defaults."""
    _validate_request(request, require_base_url=False)
    await store.save_job(job_name, request)
    return JobConfigResponse(
        job_name=job_name,
        overrides=request,
        effective=await store.effective_request(job_name),
    )


@router.delete(
    "/jobs/{job_name}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove job configuration",
)
async def delete_job(job_name: str, store: StoreDep) -> None:
    """Remove a job's overrides so it uses the defaults again."""
    if not await store.delete_job(job_name):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No configuration for job: {job_name}",
        )
