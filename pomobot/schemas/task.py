from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, field_validator


class TaskCreate(BaseModel):
    user_id: int
    description: str

    @field_validator("description")
    @classmethod
    def strip_description(cls, value: str) -> str:
        return value.strip()


class TaskRead(BaseModel):
    id: int
    user_id: int
    description: str
    created_at: datetime

    model_config = dict(from_attributes=True)
