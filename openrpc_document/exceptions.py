"""
Error taxonomy for building OpenRPC method descriptions.

Every error carries a JSON-RPC style code, a human readable message and
optional structured data, so a document server can report build failures
in the same shape it reports any other RPC error.
"""

from typing import Any, Optional


class OpenRPCDocumentError(Exception):
    """
    Base error for the document builder.

    Mirrors the JSON-RPC error object so that failures can be returned
    from ``rpc.discover`` without translation.
    """

    def __init__(
        self,
        code: int = -32000,
        message: str = "Document build error",
        data: Optional[Any] = None,
    ):
        """
        Initialize a document build error.

        Args:
            code: Error code (default -32000 for application errors)
            message: Human-readable error message
            data: Additional error data (optional)
        """
        self.code = code
        self.message = message
        self.data = data
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert the error to a JSON-RPC error object."""
        error_dict = {"code": self.code, "message": self.message}
        if self.data is not None:
            error_dict["data"] = self.data
        return error_dict


class NonDocumentableHandlerError(OpenRPCDocumentError):
    """The handler has no real declaration (synthesized or built-in code)."""

    def __init__(self, handler_name: str, reason: str = "autogenerated"):
        self.handler_name = handler_name
        self.reason = reason
        super().__init__(
            code=-32001,
            message=f"Handler is not documentable: {handler_name} ({reason})",
        )


class DeclarationError(OpenRPCDocumentError):
    """The static declaration of a handler could not be resolved."""

    def __init__(self, message: str, data: Optional[Any] = None):
        super().__init__(code=-32002, message=message, data=data)


class SchemaMutationError(OpenRPCDocumentError):
    """A schema mutator rejected a generated schema."""

    def __init__(self, mutator: Any, cause: Exception):
        self.mutator = mutator
        name = getattr(mutator, "__name__", repr(mutator))
        super().__init__(
            code=-32003,
            message=f"Schema mutation {name} failed: {cause}",
        )


class ArityMismatchError(OpenRPCDocumentError):
    """A runtime type has no static field at the same position."""

    def __init__(self, kind: str, index: int, available: int):
        self.kind = kind
        self.index = index
        self.available = available
        super().__init__(
            code=-32004,
            message=(
                f"No declared {kind} field at index {index} "
                f"({available} field(s) available)"
            ),
            data={"kind": kind, "index": index, "available": available},
        )


class MethodBuildError(OpenRPCDocumentError):
    """Building a single method failed; wraps the underlying cause."""

    def __init__(self, method: str, dump: str, cause: Exception):
        self.method = method
        self.dump = dump
        self.cause = cause
        super().__init__(
            code=-32005,
            message=f"make method error method={method} cb={dump} error={cause}",
            data={"method": method},
        )


class DuplicateMethodError(OpenRPCDocumentError):
    """Two callbacks were registered under the same method name."""

    def __init__(self, method: str):
        super().__init__(code=-32006, message=f"RPC method already registered: {method}")


class DiscoverRequestError(OpenRPCDocumentError):
    """A request to the discover endpoint could not be answered."""

    def __init__(self, code: int, message: str, detail: Optional[str] = None):
        super().__init__(
            code=code,
            message=message,
            data={"detail": detail} if detail else None,
        )


class ParseError(DiscoverRequestError):
    def __init__(self, detail: Optional[str] = None):
        super().__init__(-32700, "Parse error", detail)


class InvalidRequest(DiscoverRequestError):
    def __init__(self, detail: Optional[str] = None):
        super().__init__(-32600, "Invalid Request", detail)


class MethodNotFound(DiscoverRequestError):
    """Only ``rpc.discover`` is served; anything else lands here."""

    def __init__(self, method: str, supported: str = "rpc.discover"):
        super().__init__(
            -32601,
            f"Method not found: {method}",
            f"this endpoint only serves {supported}",
        )
