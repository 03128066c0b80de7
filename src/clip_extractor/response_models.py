"""Response models for the clip-extractor API."""

from pydantic import BaseModel, ConfigDict, Field


class ExtractionResponse(BaseModel):
    """Response returned after a clip was stored."""

    model_config = ConfigDict(populate_by_name=True)

    file_url: str = Field(alias="fileUrl")


class HealthResponse(BaseModel):
    status: str = "ok"
