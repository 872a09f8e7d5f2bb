from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel

class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.SUCCEEDED, JobStatus.FAILED, JobStatus.CANCELED)

# Replicate reports "starting" and "processing" for jobs that are not done yet
_PROVIDER_STATUSES = {
    "starting": JobStatus.PENDING,
    "pending": JobStatus.PENDING,
    "queued": JobStatus.PENDING,
    "processing": JobStatus.RUNNING,
    "running": JobStatus.RUNNING,
    "succeeded": JobStatus.SUCCEEDED,
    "failed": JobStatus.FAILED,
    "canceled": JobStatus.CANCELED,
    "cancelled": JobStatus.CANCELED,
}

class JobState(BaseModel):
    """Snapshot of a provider prediction as returned by a single API call"""
    handle: str
    status: JobStatus
    output: Optional[Tuple[Optional[str], ...]] = None
    error: Optional[str] = None

    model_config = {"frozen": True}

    @classmethod
    def from_provider(cls, data: Dict[str, Any]) -> "JobState":
        raw_status = str(data.get("status") or "").lower()
        # Unknown statuses are treated as still running so the poll ceiling decides
        status = _PROVIDER_STATUSES.get(raw_status, JobStatus.RUNNING)

        output = data.get("output")
        if isinstance(output, str):
            output = (output,)
        elif isinstance(output, (list, tuple)):
            output = tuple(str(item) if item else None for item in output)
        else:
            output = None

        error = data.get("error")
        return cls(
            handle=str(data["id"]),
            status=status,
            output=output,
            error=str(error) if error else None,
        )
