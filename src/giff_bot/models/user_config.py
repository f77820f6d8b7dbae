"""Pydantic model for a user's stored search configuration."""

from pydantic import BaseModel, Field


class UserConfig(BaseModel):
    tags: list[str] = Field(default_factory=list)
