from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Settings(BaseModel):
    """The single board-wide settings document, upserted with merge semantics."""

    model_config = ConfigDict(populate_by_name=True)

    banner_ref: str = Field(default="", alias="bannerUrl")

    @field_validator("banner_ref", mode="before")
    @classmethod
    def _missing_banner(cls, value: Any) -> Any:
        return value or ""
