"""Unified exception hierarchy for releasecore.

Everything raised by the core inherits from ReleaseCoreError. This module provides:
- Base exception hierarchy with stable error codes
- ErrorRegistry for protocol mapping
- gRPC error handler decorators (unary + streaming)

The three errors callers care about most:
    ArgumentError:    caller data failed shape/business validation. Never retried.
    ResolutionError:  the catalog's own dependency graph is broken (a range with
                      no satisfying version, a referenced resource/version that
                      does not exist). Fatal to the current tree build.
    NotFoundError:    the root release/resource/scheme is absent.

Usage at a service boundary:
    from releasecore.exceptions import ArgumentError, grpc_error_handler

    class ReleaseSchemeServicer:
        @grpc_error_handler
        async def Create(self, request, context):
            ...
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, TypeVar, cast

__all__ = [
    # Base hierarchy
    "ReleaseCoreError",
    "ConfigurationError",
    "ArgumentError",
    "ResolutionError",
    "NotFoundError",
    "CatalogError",
    "SigningError",
    # Registry
    "ErrorRegistry",
    "error_registry",
    "register_error",
    # gRPC helpers
    "get_grpc_status_code",
    "grpc_error_handler",
    "grpc_stream_error_handler",
]

logger = logging.getLogger(__name__)


# ---- Exception Hierarchy ----------------------------------------------------


class ReleaseCoreError(Exception):
    """Base exception for releasecore.

    Attributes:
        code: Stable error code string for protocol mapping (e.g. "ARGUMENT_ERROR").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class ConfigurationError(ReleaseCoreError):
    """Invalid or missing configuration."""

    code: str = "CONFIGURATION_ERROR"
    message: str = "Invalid configuration"


class ArgumentError(ReleaseCoreError):
    """Caller-supplied data failed shape or business validation."""

    code: str = "ARGUMENT_ERROR"
    message: str = "Invalid argument"


class ResolutionError(ReleaseCoreError):
    """A dependency edge could not be resolved against the catalog."""

    code: str = "RESOLUTION_ERROR"
    message: str = "Dependency resolution failed"


class NotFoundError(ReleaseCoreError):
    """Root release, resource or scheme does not exist."""

    code: str = "NOT_FOUND"
    message: str = "Entity not found"


class CatalogError(ReleaseCoreError):
    """Catalog/repository layer failure."""

    code: str = "CATALOG_ERROR"
    message: str = "Catalog lookup failed"


class SigningError(ReleaseCoreError):
    """Contract signing collaborator failure."""

    code: str = "SIGNING_ERROR"
    message: str = "Contract signing failed"


# ---- Error Registry for Protocol Mapping ------------------------------------

_E = TypeVar("_E", bound=type[ReleaseCoreError])


class ErrorRegistry:
    """Registry for mapping internal errors to external protocol codes."""

    def __init__(self) -> None:
        self._errors: dict[str, type[ReleaseCoreError]] = {}

    def register(self, code: str, error_cls: type[ReleaseCoreError]) -> None:
        self._errors[code] = error_cls

    def get(self, code: str) -> type[ReleaseCoreError] | None:
        return self._errors.get(code)

    def all(self) -> dict[str, type[ReleaseCoreError]]:
        return dict(self._errors)


error_registry = ErrorRegistry()


def register_error(code: str) -> Callable[[_E], _E]:
    """Decorator to register a custom error type.

    Usage:
        @register_error("POLICY_COMPILE_ERROR")
        class PolicyCompileError(ArgumentError):
            code = "POLICY_COMPILE_ERROR"
    """

    def decorator(cls: _E) -> _E:
        error_registry.register(code, cls)
        return cls

    return cast(Callable[[_E], _E], decorator)


# Register base errors
error_registry.register("INTERNAL_ERROR", ReleaseCoreError)
error_registry.register("CONFIGURATION_ERROR", ConfigurationError)
error_registry.register("ARGUMENT_ERROR", ArgumentError)
error_registry.register("RESOLUTION_ERROR", ResolutionError)
error_registry.register("NOT_FOUND", NotFoundError)
error_registry.register("CATALOG_ERROR", CatalogError)
error_registry.register("SIGNING_ERROR", SigningError)


# ---- gRPC Error Handling Utilities ------------------------------------------


def get_grpc_status_code(error: ReleaseCoreError) -> Any:
    """Map ReleaseCoreError to gRPC status code.

    Returns grpc.StatusCode value for the given error type.
    Import grpc locally to avoid hard dependency at module level.
    """
    import grpc

    error_to_status = {
        "CONFIGURATION_ERROR": grpc.StatusCode.FAILED_PRECONDITION,
        "ARGUMENT_ERROR": grpc.StatusCode.INVALID_ARGUMENT,
        # broken catalog graph, not a caller mistake
        "RESOLUTION_ERROR": grpc.StatusCode.DATA_LOSS,
        "NOT_FOUND": grpc.StatusCode.NOT_FOUND,
        "CATALOG_ERROR": grpc.StatusCode.UNAVAILABLE,
        "SIGNING_ERROR": grpc.StatusCode.UNAVAILABLE,
    }
    return error_to_status.get(error.code, grpc.StatusCode.INTERNAL)


def _abort_message(method_name: str, error: ReleaseCoreError) -> str:
    error_message = f"[{error.code}] {error.message}"
    logger.error(
        "%s failed: %s",
        method_name,
        error_message,
        extra={
            "error_code": error.code,
            "error_details": error.details,
        },
    )
    return error_message


def grpc_error_handler(method):
    """Decorator for unary gRPC service methods with proper error handling.

    Catches ReleaseCoreError and sets appropriate gRPC status codes.
    Logs errors and ensures consistent error response format.

    Usage:
        @grpc_error_handler
        async def GetAuthTree(self, request, context):
            ...
    """

    @functools.wraps(method)
    async def wrapper(self, request, context):
        try:
            return await method(self, request, context)
        except ReleaseCoreError as e:
            error_message = _abort_message(method.__name__, e)
            context.set_trailing_metadata([("error-code", e.code)])
            await context.abort(get_grpc_status_code(e), error_message)
            return

        except Exception as e:
            import grpc

            logger.exception("%s unexpected error: %s", method.__name__, e)
            await context.abort(
                grpc.StatusCode.INTERNAL,
                f"Unexpected {type(e)}: {e}",
            )
            return

    return wrapper


def grpc_stream_error_handler(method):
    """Decorator for streaming gRPC service methods with proper error handling.

    Works with async generator methods that use 'yield'.

    Usage:
        @grpc_stream_error_handler
        async def ListReleaseSchemes(self, request, context):
            for scheme in schemes:
                yield scheme
    """

    @functools.wraps(method)
    async def wrapper(self, request, context):
        try:
            async for item in method(self, request, context):
                yield item
        except ReleaseCoreError as e:
            error_message = _abort_message(method.__name__, e)
            context.set_trailing_metadata([("error-code", e.code)])
            await context.abort(get_grpc_status_code(e), error_message)
            return

        except Exception as e:
            import grpc

            logger.exception("%s unexpected error: %s", method.__name__, e)
            await context.abort(
                grpc.StatusCode.INTERNAL,
                f"Unexpected {type(e)}: {e}",
            )
            return

    return wrapper
