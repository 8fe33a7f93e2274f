from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ManifestIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    base_dir: Optional[str] = None
    include_paths: List[str] = Field(default_factory=list)
    private_include_paths: List[str] = Field(default_factory=list)
    public_dependencies: List[str] = Field(default_factory=list)
    private_dependencies: List[str] = Field(default_factory=list)
    dynamic_dependencies: List[str] = Field(default_factory=list)


class ResolveRequest(BaseModel):
    modules: List[ManifestIn] = Field(default_factory=list)
    externals: List[str] = Field(default_factory=list)
    strict: Optional[bool] = None


class LinkOut(BaseModel):
    name: str
    visibility: str
    reexport: bool
    external: bool = False


class PlannedModuleOut(BaseModel):
    name: str
    include_paths: List[str]
    links: List[LinkOut]
    transitive_links: List[str]
    dynamic_loads: List[str]


class ResolveResponse(BaseModel):
    plan_id: str
    plan_version: str
    strict: bool
    order: List[str]
    modules: List[PlannedModuleOut]
    externals: List[str]
    runtime_loads: Dict[str, List[str]]


class ResolveErrorBody(BaseModel):
    code: str
    message: str
    data: Dict[str, Any] = Field(default_factory=dict)


class ResolveErrorResponse(BaseModel):
    error: ResolveErrorBody
    request_id: Optional[str] = None
