"""Pydantic models for Tyk Dashboard API responses."""

from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class TykProxy(BaseModel):
    listen_path: Optional[str] = None
    target_url: Optional[str] = None


class TykApiDefinition(BaseModel):
    api_id: Optional[str] = None
    name: Optional[str] = None
    proxy: TykProxy = Field(default_factory=TykProxy)


class TykApiEntry(BaseModel):
    api_definition: TykApiDefinition = Field(default_factory=TykApiDefinition)


class TykApiListResponse(BaseModel):
    """Response of ``GET /api/apis``."""
    apis: List[TykApiEntry] = Field(default_factory=list)
    pages: int = 0

    def definitions(self) -> List[TykApiDefinition]:
        return [entry.api_definition for entry in self.apis]


class TykStatusResponse(BaseModel):
    """Status envelope returned by Tyk write endpoints (e.g. OAS import)."""
    model_config = ConfigDict(populate_by_name=True)

    status: Optional[str] = Field(default=None, alias="Status")
    message: Optional[str] = Field(default=None, alias="Message")
    meta: Optional[Any] = Field(default=None, alias="Meta")

    @property
    def ok(self) -> bool:
        return self.status == "OK"
