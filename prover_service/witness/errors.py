"""
Typed failures raised while parsing an ABI or encoding a witness map.

All errors derive from :class:`EncodingError` and carry:

- ``kind``     : stable machine code (the class name, e.g. "LengthMismatch")
- ``path``     : offending parameter path, e.g. ``outer.field.innerArray[3]``
- ``expected`` : optional description of what the schema requires
- ``actual``   : optional description of what the caller supplied

They are permanent, caller-attributable failures. The encoder never recovers
from one; the first failure aborts the whole encoding.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class EncodingError(ValueError):
    """Base class for every witness encoding / ABI failure."""

    kind: str = "EncodingError"

    def __init__(
        self,
        message: str,
        *,
        path: str = "",
        expected: Any = None,
        actual: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.expected = expected
        self.actual = actual

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "kind": self.kind,
            "path": self.path,
            "message": self.message,
        }
        if self.expected is not None:
            body["expected"] = self.expected
        if self.actual is not None:
            body["actual"] = self.actual
        return body

    def __repr__(self) -> str:
        return f"{self.kind}(path={self.path!r}, message={self.message!r})"


class MissingParameter(EncodingError):
    kind = "MissingParameter"

    def __init__(self, path: str) -> None:
        super().__init__(f"Missing parameter: {path}", path=path)


class TypeMismatch(EncodingError):
    kind = "TypeMismatch"

    def __init__(self, path: str, *, expected: str, actual: str) -> None:
        super().__init__(
            f"Expected {expected} for parameter: {path}. Got {actual}",
            path=path,
            expected=expected,
            actual=actual,
        )


class UnsupportedWidth(EncodingError):
    kind = "UnsupportedWidth"

    def __init__(self, path: str, width: int) -> None:
        super().__init__(
            f"Unsupported number size for parameter: {path}. "
            "Use a hexadecimal string instead for large numbers.",
            path=path,
            expected="hexadecimal string for widths above 64 bits",
            actual=f"number literal for width {width}",
        )
        self.width = width


class LengthMismatch(EncodingError):
    kind = "LengthMismatch"

    def __init__(self, path: str, *, expected: int, actual: int, what: str = "array") -> None:
        super().__init__(
            f"Expected {what} of length {expected} for parameter: {path}. Instead got {actual}",
            path=path,
            expected=expected,
            actual=actual,
        )


class UnsupportedType(EncodingError):
    kind = "UnsupportedType"

    def __init__(self, path: str, descriptor: Any) -> None:
        kind = descriptor.get("kind") if isinstance(descriptor, dict) else None
        super().__init__(
            f"Unsupported parameter type: {descriptor!r}. Kind: {kind}",
            path=path,
            actual=descriptor,
        )
        self.descriptor = descriptor


class SchemaError(EncodingError):
    """The ABI itself is malformed (missing length, duplicate names, ...)."""

    kind = "SchemaError"

    def __init__(self, message: str, *, path: str = "") -> None:
        super().__init__(message, path=path)


class LimitExceeded(EncodingError):
    """Schema nesting or flattened size is beyond the configured bound."""

    kind = "LimitExceeded"

    def __init__(self, path: str, *, limit: str, maximum: int, actual: Optional[int] = None) -> None:
        super().__init__(
            f"Schema {limit} limit exceeded at {path or '<root>'}: max {maximum}",
            path=path,
            expected=maximum,
            actual=actual,
        )
        self.limit = limit


__all__ = [
    "EncodingError",
    "MissingParameter",
    "TypeMismatch",
    "UnsupportedWidth",
    "LengthMismatch",
    "UnsupportedType",
    "SchemaError",
    "LimitExceeded",
]
