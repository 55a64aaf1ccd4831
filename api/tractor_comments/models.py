# api/tractor_comments/models.py
from datetime import datetime

from pydantic import Field, field_validator

from api.tractors.models import CamelModel, required_text


class CommentListRequest(CamelModel):
    tractor_id: str = Field(default=None, validate_default=True)

    @field_validator("tractor_id", mode="before")
    @classmethod
    def check_tractor_id(cls, v):
        return required_text(v, "Tractor ID is required")


class CommentCreate(CommentListRequest):
    text: str = Field(default=None, validate_default=True)
    author: str = Field(default=None, validate_default=True)

    @field_validator("text", mode="before")
    @classmethod
    def check_text(cls, v):
        return required_text(v, "Comment text is required")

    @field_validator("author", mode="before")
    @classmethod
    def check_author(cls, v):
        return required_text(v, "Author is required")


class CommentDeleteRequest(CamelModel):
    comment_id: str = Field(default=None, validate_default=True)

    @field_validator("comment_id", mode="before")
    @classmethod
    def check_comment_id(cls, v):
        return required_text(v, "Comment ID is required")


class CommentRead(CamelModel):
    id: str
    tractor_id: str
    text: str
    author: str
    created_at: datetime
