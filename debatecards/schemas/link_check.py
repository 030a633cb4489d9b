from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class LinkCheckRequest(BaseModel):
    """Request body for the link check endpoint."""
    url: str = Field(..., description="Candidate citation link (absolute http/https URL)")


class ProbeResult(BaseModel):
    """Outcome of resolving one citation link. Absent fields are omitted on the wire."""
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = Field(..., description="Whether any strategy reached the link")
    status: Optional[int] = Field(None, description="HTTP status of the deciding probe")
    final_url: Optional[str] = Field(None, alias="finalUrl", description="Canonical URL after redirects or DOI resolution")
    error: Optional[str] = Field(None, description="Reason the link could not be checked")

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
