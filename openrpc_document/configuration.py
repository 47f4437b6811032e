"""Runtime settings for document generation."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import find_dotenv, load_dotenv


@dataclass(frozen=True)
class DocumentSettings:
    title: str = "OpenRPC Document"
    version: str = "1.0.0"
    external_docs_base_url: Optional[str] = None
    source_root: str = "."
    max_workers: int = 1
    log_level: str = "INFO"

    @classmethod
    def from_environment(cls, load_env_file: bool = True) -> "DocumentSettings":
        if load_env_file:
            load_dotenv(find_dotenv(usecwd=True))
        return cls(
            title=os.environ.get("OPENRPC_TITLE", "OpenRPC Document"),
            version=os.environ.get("OPENRPC_VERSION", "1.0.0"),
            external_docs_base_url=(
                os.environ.get("OPENRPC_EXTERNAL_DOCS_BASE_URL") or None
            ),
            source_root=os.environ.get("OPENRPC_SOURCE_ROOT") or os.getcwd(),
            max_workers=_max_workers(os.environ.get("OPENRPC_MAX_WORKERS", "1")),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        )


def _max_workers(raw: str) -> int:
    try:
        return max(1, int(raw))
    except ValueError:
        raise ValueError(
            f"OPENRPC_MAX_WORKERS must be an integer, got {raw!r}"
        ) from None
