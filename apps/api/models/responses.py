from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel


class ResourceSummary(BaseModel):
    name: str
    kind: Literal["collection", "singular"]
    path: str


class ResourceIndex(BaseModel):
    resources: List[ResourceSummary]
