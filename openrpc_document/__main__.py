"""
Generate an OpenRPC document from a Python module.

    python -m openrpc_document myapp.rpc:registry --output openrpc.json
    python -m openrpc_document myapp.eth:api --service eth

The target is ``module:attribute``. A ``CallbackRegistry`` is documented as
registered; with ``--service`` any other object is treated as a receiver
whose public methods are the handlers.
"""

from __future__ import annotations

import argparse
import dataclasses
import importlib
import sys
from pathlib import Path
from typing import Any, List, Optional

from loguru import logger

from openrpc_document.configuration import DocumentSettings
from openrpc_document.document import (
    DocumentAssembler,
    ServiceProvider,
    ethereum_service_provider,
)
from openrpc_document.exceptions import OpenRPCDocumentError
from openrpc_document.logging_config import setup_loguru_config
from openrpc_document.registry import CallbackRegistry


def load_target(target: str) -> Any:
    module_name, sep, attribute = target.partition(":")
    if not sep or not attribute:
        raise ValueError(f"Target must look like module:attribute, got {target!r}")
    module = importlib.import_module(module_name)
    obj: Any = module
    for part in attribute.split("."):
        obj = getattr(obj, part)
    return obj


def build_provider(target: Any, service: Optional[str]) -> ServiceProvider:
    if isinstance(target, CallbackRegistry):
        return ServiceProvider.from_registry(target)
    if service:
        return ethereum_service_provider(target, service)
    raise ValueError(
        f"{type(target).__name__} is not a CallbackRegistry; pass --service to "
        "document its methods"
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Generate an OpenRPC document from registered RPC handlers."
    )
    parser.add_argument("target", help="module:attribute of a registry or receiver")
    parser.add_argument("--service", help="Method name prefix for receiver targets")
    parser.add_argument("--output", default="-", help="Output path (default: stdout)")
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="Leave out handlers that fail to build instead of aborting",
    )
    parser.add_argument("--workers", type=int, help="Build methods in N threads")
    args = parser.parse_args(argv)

    try:
        settings = DocumentSettings.from_environment()
    except ValueError as exc:
        setup_loguru_config()
        logger.error(f"Invalid configuration: {exc}")
        return 2
    setup_loguru_config(settings.log_level)
    if args.workers:
        settings = dataclasses.replace(settings, max_workers=max(1, args.workers))

    try:
        provider = build_provider(load_target(args.target), args.service)
    except (ImportError, AttributeError, ValueError) as exc:
        logger.error(f"Cannot load {args.target}: {exc}")
        return 2

    assembler = DocumentAssembler(provider, settings, strict=not args.lenient)
    try:
        rendered = assembler.to_json() + "\n"
    except OpenRPCDocumentError as exc:
        logger.error(f"Failed to build document: {exc.message}")
        return 1

    if args.output == "-":
        sys.stdout.write(rendered)
    else:
        Path(args.output).write_text(rendered, encoding="utf-8")
        logger.info(f"Wrote {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
