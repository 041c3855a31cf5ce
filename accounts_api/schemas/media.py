"""Result of an upload to the media host."""

from pydantic import BaseModel, Field


class MediaUploadResult(BaseModel):
    url: str = Field(..., description="Public (https) URL of the stored asset")
    public_id: str = Field(default="", description="Media host identifier of the asset")
