"""Serves the generated document over HTTP and as ``rpc.discover``."""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, ValidationError

from openrpc_document.document import DocumentAssembler
from openrpc_document.exceptions import InvalidRequest, MethodNotFound, ParseError

DISCOVER_METHOD = "rpc.discover"


class JSONRPCRequest(BaseModel):
    jsonrpc: str = "2.0"
    method: str
    params: Any | None = None
    id: Any | None = None


def _error(error: Dict[str, Any], request_id: Any = None, status_code: int = 200):
    return JSONResponse(
        status_code=status_code,
        content={"jsonrpc": "2.0", "error": error, "id": request_id},
    )


def create_discover_router(
    assembler: DocumentAssembler, prefix: Optional[str] = None
) -> APIRouter:
    """
    Build the document once and expose it.

    ``GET /openrpc.json`` returns the document; ``POST /rpc`` answers the
    JSON-RPC ``rpc.discover`` method.
    """
    document = assembler.document().to_dict()
    logger.info(f"Serving OpenRPC document with {len(document['methods'])} method(s)")

    router = APIRouter(prefix=prefix or "")

    @router.get("/openrpc.json")
    async def openrpc_document() -> Dict[str, Any]:
        return document

    @router.post("/rpc")
    async def discover(request: Request) -> Response:
        try:
            payload = await request.json()
        except json.JSONDecodeError as exc:
            return _error(ParseError(str(exc)).to_dict(), status_code=400)

        if not isinstance(payload, dict):
            return _error(
                InvalidRequest("request must be a JSON object").to_dict(),
                status_code=400,
            )

        try:
            rpc_request = JSONRPCRequest(**payload)
        except ValidationError as exc:
            logger.warning(f"Rejected discover request: {exc.error_count()} error(s)")
            fields = ", ".join(".".join(map(str, e["loc"])) for e in exc.errors())
            return _error(
                InvalidRequest(f"invalid fields: {fields}").to_dict(), payload.get("id")
            )

        if rpc_request.method != DISCOVER_METHOD:
            return _error(
                MethodNotFound(rpc_request.method, DISCOVER_METHOD).to_dict(),
                rpc_request.id,
            )

        return JSONResponse(
            content={"jsonrpc": "2.0", "result": document, "id": rpc_request.id}
        )

    return router
