from enum import Enum

from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from typing import List, Optional

from app.utils.message_helpers import is_data_url


class ChatMode(str, Enum):
    """Requested operation category."""

    CHAT = "chat"
    IMAGE = "image"
    EDIT = "edit"
    SUMMARIZE = "summarize"
    TRANSLATE = "translate"
    CODE = "code"

    @property
    def is_streaming(self) -> bool:
        return self not in (ChatMode.IMAGE, ChatMode.EDIT)


class Message(BaseModel):
    """Single conversation turn"""
    role: str = Field(..., pattern="^(user|assistant)$")
    content: str


class ChatRequest(BaseModel):
    messages: List[Message] = Field(default_factory=list)
    mode: ChatMode = ChatMode.CHAT
    image_to_edit: Optional[str] = Field(None, alias="imageToEdit")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "messages": [{"role": "user", "content": "hi"}],
                    "mode": "chat",
                },
                {
                    "messages": [{"role": "user", "content": "make it black and white"}],
                    "mode": "edit",
                    "imageToEdit": "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAA...",
                },
            ]
        },
    )

    @field_validator("image_to_edit")
    @classmethod
    def check_data_url(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not is_data_url(value):
            raise ValueError("imageToEdit must be a data URL (data:<mime>;base64,<payload>)")
        return value

    @model_validator(mode="after")
    def check_messages(self) -> "ChatRequest":
        if self.mode.is_streaming and not self.messages:
            raise ValueError(f"messages must not be empty for {self.mode.value} mode")
        return self

    def message_dicts(self) -> list[dict]:
        return [m.model_dump() for m in self.messages]
