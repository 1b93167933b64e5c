"""Build environment construction."""

from datetime import datetime
from typing import Mapping


def default_build_tag(job_name: str, build_number: int) -> str:
    """Build tag in the ``svntag-<job>-<number>`` form."""
    return f"svntag-{job_name.replace('/', '-')}-{build_number}"


def build_environment(
    job_name: str,
    build_number: int,
    build_tag: str | None = None,
    variables: Mapping[str, str] | None = None,
    now: datetime | None = None,
) -> dict[str, str]:
    """Variables available to tag templates for one build.

    Injected ``variables`` may override the computed date values but never
    the job identity (``JOB_NAME``, ``BUILD_NUMBER``, ``BUILD_TAG``).
    """
    now = now or datetime.now()

    env: dict[str, str] = {
        "BUILD_ID": now.strftime("%Y-%m-%d_%H-%M-%S"),
        "BUILD_DATE": now.strftime("%Y-%m-%d"),
        "BUILD_TIMESTAMP": now.strftime("%Y%m%d-%H%M%S"),
    }
    env.update(variables or {})
    env.update(
        {
            "JOB_NAME": job_name,
            "BUILD_NUMBER": str(build_number),
            "BUILD_TAG": build_tag or default_build_tag(job_name, build_number),
        }
    )
    return env
