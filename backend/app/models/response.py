from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class ImageReply(BaseModel):
    """Buffered answer for the image modes"""

    model_config = ConfigDict(populate_by_name=True)

    content: str
    image_url: Optional[str] = Field(None, alias="imageUrl")

    def to_body(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class ErrorResponse(BaseModel):
    error: str
