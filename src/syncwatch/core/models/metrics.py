from typing import Dict

from pydantic import BaseModel, ConfigDict, Field


class CounterSample(BaseModel):
    """A single named counter value, optionally tagged (e.g. ``stream=users``)."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: int = Field(ge=0)
    tags: Dict[str, str] = Field(default_factory=dict)
