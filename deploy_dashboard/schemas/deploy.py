from typing import List, Optional

from pydantic import BaseModel, Field

from deploy_dashboard.domain.entities.deployment import DeployRecord


class DeployRequest(BaseModel):
    """Documented shape of the CI payload; validation happens in DeployService."""

    title: str
    projectName: str
    operator: str
    environment: str
    branch: str
    commit: str
    status: str = Field(..., description="success | failed | running | canceled")
    note: Optional[str] = None
    deployedAt: Optional[str] = Field(None, description="ISO-8601 instant; defaults to now")


class DeployListResponse(BaseModel):
    data: List[DeployRecord]


class DeployCreateResponse(BaseModel):
    data: DeployRecord


class ProjectsResponse(BaseModel):
    data: List[str]


class CleanResponse(BaseModel):
    ok: bool = True
    cleared: int
    mode: str


class OkResponse(BaseModel):
    ok: bool = True


class ErrorResponse(BaseModel):
    error: str
