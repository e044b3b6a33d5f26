"""Maintenance job API contract payloads."""

from pydantic import BaseModel


class JobRunResponse(BaseModel):
    """Result of a manually triggered job run."""

    job: str
    affected: int


class JobListResponse(BaseModel):
    jobs: list[str]


__all__ = ["JobListResponse", "JobRunResponse"]
