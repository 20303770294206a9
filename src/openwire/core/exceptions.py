"""
Custom exception classes for openwire.

Decode/encode failures are local and recoverable: each one carries enough
context (field, owning type, received JSON type, variant tag) to diagnose the
problem without looking at the raw payload again.
"""

from typing import Any, Dict, Optional


class OpenwireException(Exception):
    """Base exception class for all openwire exceptions."""

    pass


class WireFormatError(OpenwireException):
    """
    Raised when a wire value cannot be decoded into (or encoded from) its model.

    Example:
        >>> raise WireFormatError(
        ...     reason="Unexpected value",
        ...     field="limit",
        ...     details={"received": "string"},
        ... )
    """

    def __init__(
        self,
        reason: str,
        *,
        field: Optional[str] = None,
        owner: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.reason = reason
        self.field = field
        self.owner = owner
        self.details = details or {}
        message = f"{reason}"
        if self.details:
            message += f" - {self.details}"
        super().__init__(message)


class MissingRequiredField(WireFormatError):
    """Raised when a structurally required key is absent from a wire object."""

    def __init__(self, field: str, owner: str):
        super().__init__(
            f"Missing required field {field!r} on {owner}",
            field=field,
            owner=owner,
        )


class MalformedWireValue(WireFormatError):
    """Raised when a wire value has the wrong JSON type (e.g. expected number, got string)."""

    def __init__(
        self,
        field: str,
        *,
        expected: str,
        received: str,
        owner: Optional[str] = None,
    ):
        self.expected = expected
        self.received = received
        where = f"{owner}.{field}" if owner else field
        super().__init__(
            f"Malformed value for {where!r}: expected {expected}, got {received}",
            field=field,
            owner=owner,
            details={"expected": expected, "received": received},
        )


class UnrecognizedUnionShape(WireFormatError):
    """Raised when no variant of a union matches the shape of a wire value."""

    def __init__(self, field: Optional[str], *, received: str, union: str):
        self.received = received
        self.union = union
        super().__init__(
            f"No {union} variant matches a JSON {received}",
            field=field,
            owner=union,
            details={"received": received},
        )


class UnknownVariantTag(WireFormatError):
    """Raised when a discriminator does not name any variant of a registry."""

    def __init__(self, tag: str, *, registry: Optional[str] = None):
        self.tag = tag
        self.registry = registry
        super().__init__(
            f"Unknown variant tag {tag!r}" + (f" for {registry}" if registry else ""),
            owner=registry,
            details={"tag": tag},
        )


class InvalidPageParameter(OpenwireException, ValueError):
    """Raised when list request parameters are out of bounds or contradictory."""

    def __init__(self, parameter: str, value: Any, reason: str):
        self.parameter = parameter
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {parameter}={value!r}: {reason}")


class VariantRegistryError(RuntimeError):
    """Programming error in registry setup or use (duplicate tags, unregistered payload types)."""

    pass


class TransportError(OpenwireException):
    """Raised when an HTTP response body is not a JSON object."""

    pass
