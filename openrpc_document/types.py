"""OpenRPC document records."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

OPENRPC_VERSION = "1.2.6"

Schema = Dict[str, Any]


class ContentDescriptor(BaseModel):
    """One parameter or result of a method."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    summary: str = ""
    description: str = ""
    required: bool = True
    schema_: Schema = Field(default_factory=dict, alias="schema")


class ExternalDocs(BaseModel):
    description: str = ""
    url: str = ""


class Method(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    summary: str = ""
    description: str = ""
    external_docs: ExternalDocs = Field(
        default_factory=ExternalDocs, alias="externalDocs"
    )
    params: List[ContentDescriptor] = Field(default_factory=list)
    result: ContentDescriptor
    deprecated: bool = False


class Info(BaseModel):
    title: str = "OpenRPC Document"
    version: str = "1.0.0"
    description: Optional[str] = None


class Components(BaseModel):
    schemas: Dict[str, Schema] = Field(default_factory=dict)


class OpenRPCDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    openrpc: str = OPENRPC_VERSION
    info: Info = Field(default_factory=Info)
    external_docs: Optional[ExternalDocs] = Field(default=None, alias="externalDocs")
    methods: List[Method] = Field(default_factory=list)
    components: Components = Field(default_factory=Components)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def null_content_descriptor() -> ContentDescriptor:
    """Placeholder result for handlers that return nothing."""
    return ContentDescriptor(
        name="Null",
        description="JSON null",
        schema={"type": "null"},
    )
