# api/tractor_issues/models.py
from datetime import datetime
from typing import Any

from pydantic import AliasChoices, Field, computed_field, field_validator

from api.tractors.models import CamelModel, required_text
from .db_manager import coerce_severity


class IssueListRequest(CamelModel):
    tractor_id: str = Field(default=None, validate_default=True)

    @field_validator("tractor_id", mode="before")
    @classmethod
    def check_tractor_id(cls, v):
        return required_text(v, "Tractor ID is required")


class IssueCreate(IssueListRequest):
    # "issue" is the older name for the description
    description: str = Field(
        default=None,
        validation_alias=AliasChoices("description", "issue"),
        validate_default=True,
    )
    severity: str = "Medium"

    @field_validator("description", mode="before")
    @classmethod
    def check_description(cls, v):
        return required_text(v, "Issue description is required")

    @field_validator("severity", mode="before")
    @classmethod
    def default_severity(cls, v: Any) -> str:
        return coerce_severity(v)


class IssueIdRequest(CamelModel):
    issue_id: str = Field(default=None, validate_default=True)

    @field_validator("issue_id", mode="before")
    @classmethod
    def check_issue_id(cls, v):
        return required_text(v, "Issue ID is required")


class IssueRead(CamelModel):
    id: str
    tractor_id: str
    description: str
    severity: str
    time_created: datetime
    time_completed: datetime | None = None

    @computed_field(alias="isOpen")
    @property
    def is_open(self) -> bool:
        return self.time_completed is None
