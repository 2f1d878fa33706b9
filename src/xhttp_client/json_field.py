"""
Targeted JSON field lookup.

Walks raw JSON bytes along a key path and returns the bytes of the value
found there, skipping sibling values without building Python objects for
them. Keys of the form ``[N]`` index into arrays.
"""
import json
import re
from typing import Sequence, Tuple, Union

from .errors import KeyPathNotFoundError, MalformedJSONError
from .types import JsonType

_WHITESPACE = b" \t\n\r"
_STRING = re.compile(rb'"(?:[^"\\]|\\.)*"', re.DOTALL)
_NUMBER = re.compile(rb"-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?")
_ARRAY_INDEX = re.compile(r"^\[(\d+)\]$")
_LITERALS = (
    (b"true", JsonType.BOOLEAN),
    (b"false", JsonType.BOOLEAN),
    (b"null", JsonType.NULL),
)


def get_json_field(data: Union[bytes, str], *keys: str) -> Tuple[bytes, JsonType]:
    """Return the raw value at ``keys`` and its type.

    String values come back without their surrounding quotes (escape
    sequences are left as they appear in the payload). Any other value is
    returned exactly as written.
    """
    raw = data.encode("utf-8") if isinstance(data, str) else bytes(data)
    start, end, kind = locate(raw, keys)
    if kind is JsonType.STRING:
        return raw[start + 1:end - 1], kind
    return raw[start:end], kind


def get_json_raw(data: Union[bytes, str], *keys: str) -> bytes:
    """Like get_json_field, but keeps strings quoted so the result is valid JSON."""
    raw = data.encode("utf-8") if isinstance(data, str) else bytes(data)
    start, end, _ = locate(raw, keys)
    return raw[start:end]


def locate(data: bytes, keys: Sequence[str]) -> Tuple[int, int, JsonType]:
    """Find the ``[start, end)`` span and type of the value at ``keys``."""
    pos = _skip_ws(data, 0)
    if pos >= len(data):
        raise MalformedJSONError("empty document", pos)

    for key in keys:
        match = _ARRAY_INDEX.match(key)
        if match:
            pos = _find_element(data, pos, int(match.group(1)), keys)
        else:
            pos = _find_member(data, pos, key, keys)

    end, kind = _scan_value(data, pos)
    return pos, end, kind


def _skip_ws(data: bytes, pos: int) -> int:
    while pos < len(data) and data[pos] in _WHITESPACE:
        pos += 1
    return pos


def _expect(data: bytes, pos: int, token: bytes) -> int:
    if data[pos:pos + 1] != token:
        found = data[pos:pos + 1].decode("latin-1") or "end of input"
        raise MalformedJSONError(f"expected {token.decode()!r}, found {found!r}", pos)
    return pos + 1


def _scan_string(data: bytes, pos: int) -> int:
    match = _STRING.match(data, pos)
    if not match:
        raise MalformedJSONError("invalid or unterminated string", pos)
    return match.end()


def _key_matches(token: bytes, key: bytes) -> bool:
    inner = token[1:-1]
    if b"\\" not in inner:
        return inner == key
    try:
        return json.loads(token).encode("utf-8") == key
    except ValueError:
        return False


def _scan_value(data: bytes, pos: int) -> Tuple[int, JsonType]:
    """Return the end offset and type of the value starting at ``pos``."""
    head = data[pos:pos + 1]
    if head == b"{":
        return _scan_container(data, pos), JsonType.OBJECT
    if head == b"[":
        return _scan_container(data, pos), JsonType.ARRAY
    return _scan_scalar(data, pos)


def _scan_scalar(data: bytes, pos: int) -> Tuple[int, JsonType]:
    head = data[pos:pos + 1]
    if head == b'"':
        return _scan_string(data, pos), JsonType.STRING

    for literal, kind in _LITERALS:
        if data.startswith(literal, pos):
            return pos + len(literal), kind

    match = _NUMBER.match(data, pos)
    if match:
        return match.end(), JsonType.NUMBER

    if not head:
        raise MalformedJSONError("unexpected end of input", pos)
    raise MalformedJSONError(f"unexpected character {head.decode('latin-1')!r}", pos)


def _scan_member_key(data: bytes, pos: int) -> int:
    """Skip ``"key":`` and return the start of the member's value."""
    pos = _skip_ws(data, _scan_string(data, pos))
    return _skip_ws(data, _expect(data, pos, b":"))


def _scan_container(data: bytes, pos: int) -> int:
    """Return the end offset of the object or array starting at ``pos``.

    Nesting is tracked with a stack of pending closers, so depth is not
    limited by the interpreter's recursion limit.
    """
    closers = []
    while True:
        # pos is at the start of a value
        head = data[pos:pos + 1]
        if head == b"{":
            closers.append(b"}")
            pos = _skip_ws(data, pos + 1)
            if data[pos:pos + 1] != b"}":
                pos = _scan_member_key(data, pos)
                continue
            closers.pop()
            pos += 1
        elif head == b"[":
            closers.append(b"]")
            pos = _skip_ws(data, pos + 1)
            if data[pos:pos + 1] != b"]":
                continue
            closers.pop()
            pos += 1
        else:
            pos, _ = _scan_scalar(data, pos)

        # A value just ended: close finished containers, then move to the next sibling
        while True:
            if not closers:
                return pos
            pos = _skip_ws(data, pos)
            if data[pos:pos + 1] == closers[-1]:
                closers.pop()
                pos += 1
                continue
            pos = _skip_ws(data, _expect(data, pos, b","))
            if closers[-1] == b"}":
                pos = _scan_member_key(data, pos)
            break


def _find_member(data: bytes, pos: int, key: str, keys: Sequence[str]) -> int:
    """Return the start of the value stored under ``key`` in the object at ``pos``."""
    if data[pos:pos + 1] != b"{":
        # Path descends into a non-object value
        _scan_value(data, pos)
        raise KeyPathNotFoundError(keys)

    wanted = key.encode("utf-8")
    pos = _skip_ws(data, pos + 1)
    if data[pos:pos + 1] == b"}":
        raise KeyPathNotFoundError(keys)

    while True:
        key_end = _scan_string(data, pos)
        found = _key_matches(data[pos:key_end], wanted)
        pos = _skip_ws(data, key_end)
        pos = _skip_ws(data, _expect(data, pos, b":"))
        if found:
            return pos
        pos, _ = _scan_value(data, pos)
        pos = _skip_ws(data, pos)
        if data[pos:pos + 1] == b"}":
            raise KeyPathNotFoundError(keys)
        pos = _skip_ws(data, _expect(data, pos, b","))


def _find_element(data: bytes, pos: int, index: int, keys: Sequence[str]) -> int:
    """Return the start of element ``index`` in the array at ``pos``."""
    if data[pos:pos + 1] != b"[":
        _scan_value(data, pos)
        raise KeyPathNotFoundError(keys)

    pos = _skip_ws(data, pos + 1)
    if data[pos:pos + 1] == b"]":
        raise KeyPathNotFoundError(keys)

    current = 0
    while True:
        if current == index:
            return pos
        pos, _ = _scan_value(data, pos)
        pos = _skip_ws(data, pos)
        if data[pos:pos + 1] == b"]":
            raise KeyPathNotFoundError(keys)
        pos = _skip_ws(data, _expect(data, pos, b","))
        current += 1
