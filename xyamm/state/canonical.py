"""
Canonical encoding primitives for account identifiers.

Addresses and mint ids are 32-byte values written as lowercase, 0x-prefixed
hex. Derivation hashes over their raw bytes, so every identifier is
canonicalized before it is hashed or compared.
"""

from __future__ import annotations

import re


ADDRESS_NBYTES = 32

_HEX_CHARS_RE = re.compile(r"^[0-9a-fA-F]+$")


def domain_sep_bytes(label: str, version: int = 1) -> bytes:
    """
    Create a domain separation prefix.

    The output is ASCII-only and NUL-terminated to make concatenation unambiguous.
    """
    if not isinstance(label, str) or not label:
        raise TypeError("label must be a non-empty str")
    if "\x00" in label:
        raise ValueError("label must not contain NUL")
    try:
        label_bytes = label.encode("ascii")
    except UnicodeEncodeError as exc:
        raise ValueError("label must be ASCII") from exc
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError("version must be a positive int")
    return b"xyamm:" + label_bytes + b":v" + str(version).encode("ascii") + b"\x00"


def canonical_hex_fixed_allow_0x(hex_str: str, *, nbytes: int = ADDRESS_NBYTES, name: str) -> str:
    """
    Canonicalize a fixed-size hex string (lowercase, 0x-prefixed).

    Accepts either 0x-prefixed or raw hex input.
    """
    if not isinstance(hex_str, str):
        raise TypeError(f"{name} must be a str")
    if not isinstance(nbytes, int) or isinstance(nbytes, bool) or nbytes <= 0:
        raise ValueError("nbytes must be a positive int")

    s = hex_str.strip()
    if s.lower().startswith("0x"):
        s = s[2:]
    expected_len = 2 * nbytes
    if len(s) != expected_len:
        raise ValueError(f"{name} must be {nbytes} bytes (hex length {expected_len})")
    if not _HEX_CHARS_RE.fullmatch(s):
        raise ValueError(f"{name} must be valid hex")
    return "0x" + s.lower()


def address_bytes(hex_str: str, *, name: str) -> bytes:
    """Decode a canonical-or-raw 32-byte hex address."""
    return bytes.fromhex(canonical_hex_fixed_allow_0x(hex_str, name=name)[2:])
