"""
Type translation policies.

A policy answers one question: given a Rust type expression, which host
(ctypes) type represents it across the FFI boundary. Policies compose with
``+``; the left operand is consulted first.

Example:
    policy = BASIC + LIBC
    policy.lookup("*const c_char")   # ctypes.POINTER(ctypes.c_char)
"""

import ctypes
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Tuple

from ..errors import InlineRustError

_MISSING = object()


class UnmappedTypeError(InlineRustError, LookupError):
    """Raised when a policy has no host type for a Rust type."""

    def __init__(self, rust_type: str):
        self.rust_type = rust_type
        super().__init__(f"Could not find information about {rust_type!r} in the type policy")


def normalize_type(rust_type: str) -> str:
    """Collapse whitespace so that ``*const  u8`` and ``*const u8`` compare equal."""
    return " ".join(rust_type.split())


@dataclass(frozen=True)
class TypePolicy:
    """Immutable mapping from Rust type expressions to host types.

    Attributes:
        name: Human-readable name used in logs and ``repr``
        mapping: Exact-match table keyed by normalized Rust type text
        parts: Component policies, in lookup order, for composed policies
    """

    name: str
    mapping: Mapping[str, Any] = field(default_factory=dict)
    parts: Tuple["TypePolicy", ...] = ()

    def __add__(self, other: "TypePolicy") -> "TypePolicy":
        if not isinstance(other, TypePolicy):
            return NotImplemented
        return self.compose(other)

    def compose(self, other: "TypePolicy") -> "TypePolicy":
        """Combine two policies; this policy wins on conflicting entries."""
        return TypePolicy(
            name=f"{self.name} + {other.name}",
            parts=self._flatten() + other._flatten(),
        )

    def _flatten(self) -> Tuple["TypePolicy", ...]:
        if self.parts:
            return self.parts
        return (self,)

    def _find(self, key: str) -> Any:
        for part in self._flatten():
            if key in part.mapping:
                return part.mapping[key]
        return _MISSING

    def lookup(self, rust_type: str) -> Any:
        """Find the host type for a Rust type.

        Pointer types (``*const T`` and ``*mut T``) resolve to
        ``ctypes.POINTER`` of the pointee unless the pointer is mapped
        explicitly.

        Raises:
            UnmappedTypeError: If no part of the policy knows the type
        """
        key = normalize_type(rust_type)

        host = self._find(key)
        if host is not _MISSING:
            return host

        for prefix in ("*const ", "*mut "):
            if key.startswith(prefix):
                pointee = key[len(prefix):]
                try:
                    inner = self.lookup(pointee)
                except UnmappedTypeError:
                    raise UnmappedTypeError(rust_type) from None
                if inner is None:
                    return ctypes.c_void_p
                return ctypes.POINTER(inner)

        raise UnmappedTypeError(rust_type)

    def __contains__(self, rust_type: str) -> bool:
        try:
            self.lookup(rust_type)
        except UnmappedTypeError:
            return False
        return True


_BASIC_TYPES: Dict[str, Any] = {
    "()": None,
    "bool": ctypes.c_bool,
    "char": ctypes.c_uint32,
    "i8": ctypes.c_int8,
    "i16": ctypes.c_int16,
    "i32": ctypes.c_int32,
    "i64": ctypes.c_int64,
    "u8": ctypes.c_uint8,
    "u16": ctypes.c_uint16,
    "u32": ctypes.c_uint32,
    "u64": ctypes.c_uint64,
    "isize": ctypes.c_ssize_t,
    "usize": ctypes.c_size_t,
    "f32": ctypes.c_float,
    "f64": ctypes.c_double,
}

_LIBC_TYPES: Dict[str, Any] = {
    "c_char": ctypes.c_char,
    "c_schar": ctypes.c_byte,
    "c_uchar": ctypes.c_ubyte,
    "c_short": ctypes.c_short,
    "c_ushort": ctypes.c_ushort,
    "c_int": ctypes.c_int,
    "c_uint": ctypes.c_uint,
    "c_long": ctypes.c_long,
    "c_ulong": ctypes.c_ulong,
    "c_longlong": ctypes.c_longlong,
    "c_ulonglong": ctypes.c_ulonglong,
    "c_float": ctypes.c_float,
    "c_double": ctypes.c_double,
    "c_void": None,
    "size_t": ctypes.c_size_t,
    "ssize_t": ctypes.c_ssize_t,
}

BASIC = TypePolicy(name="basic", mapping=_BASIC_TYPES)
"""Rust primitive types. Used when a unit never sets a policy."""

LIBC = TypePolicy(name="libc", mapping=_LIBC_TYPES)
"""C types from the ``libc`` crate (``libc::c_int`` and friends)."""
