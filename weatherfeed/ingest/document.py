"""JSON document materializer with typed, path-addressed field access."""

import json
import math
from typing import Any

from weatherfeed.ingest.errors import DocumentSyntaxError, MissingField, TypeMismatch

PathPart = str | int
KeyPath = str | tuple[PathPart, ...]


def materialize(data: bytes) -> "Document":
    """Parse UTF-8 JSON bytes. Nothing is returned unless the whole input parses."""
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DocumentSyntaxError(e.start, f"invalid UTF-8: {e.reason}") from e
    try:
        root = json.loads(text)
    except json.JSONDecodeError as e:
        raise DocumentSyntaxError(e.pos, e.msg) from e
    return Document(root)


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "list"
    if isinstance(value, dict):
        return "map"
    return type(value).__name__


def _split(path: KeyPath) -> tuple[PathPart, ...]:
    if isinstance(path, tuple):
        return path
    if not path:
        return ()
    return tuple(int(p) if p.isdigit() else p for p in path.split("."))


class Document:
    """Read-only view over a parsed JSON value.

    Paths are dotted strings (``"now.temp"``, ``"daily.0.fxDate"``) or tuples
    of keys and list indices. Numeric getters accept numbers and numeric
    strings, since the service sends most numbers as strings.
    """

    def __init__(self, root: Any, prefix: str = ""):
        self._root = root
        self._prefix = prefix

    def _label(self, parts: tuple[PathPart, ...]) -> str:
        tail = ".".join(str(p) for p in parts)
        if self._prefix and tail:
            return f"{self._prefix}.{tail}"
        return self._prefix or tail

    def _resolve(self, path: KeyPath) -> Any:
        parts = _split(path)
        node = self._root
        for i, part in enumerate(parts):
            walked = parts[: i + 1]
            if isinstance(node, dict):
                key = str(part)
                if key not in node:
                    raise MissingField(self._label(walked))
                node = node[key]
            elif isinstance(node, list):
                if not isinstance(part, int):
                    raise TypeMismatch(self._label(parts[:i]), "map", "list")
                if not 0 <= part < len(node):
                    raise MissingField(self._label(walked))
                node = node[part]
            else:
                raise TypeMismatch(
                    self._label(parts[:i]), "map or list", _json_type(node)
                )
        if node is None:
            raise MissingField(self._label(parts))
        return node

    def get_str(self, path: KeyPath) -> str:
        value = self._resolve(path)
        if not isinstance(value, str):
            raise TypeMismatch(self._label(_split(path)), "string", _json_type(value))
        return value

    def get_int(self, path: KeyPath) -> int:
        value = self._resolve(path)
        label = self._label(_split(path))
        if isinstance(value, bool):
            raise TypeMismatch(label, "integer", "boolean")
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                raise TypeMismatch(label, "integer", repr(value)) from None
        raise TypeMismatch(label, "integer", _json_type(value))

    def get_float(self, path: KeyPath) -> float:
        value = self._resolve(path)
        label = self._label(_split(path))
        if isinstance(value, bool):
            raise TypeMismatch(label, "number", "boolean")
        if isinstance(value, (int, float)):
            result = float(value)
        elif isinstance(value, str):
            try:
                result = float(value.strip())
            except ValueError:
                raise TypeMismatch(label, "number", repr(value)) from None
        else:
            raise TypeMismatch(label, "number", _json_type(value))
        if not math.isfinite(result):
            raise TypeMismatch(label, "finite number", repr(value))
        return result

    def get_map(self, path: KeyPath) -> dict[str, Any]:
        value = self._resolve(path)
        if not isinstance(value, dict):
            raise TypeMismatch(self._label(_split(path)), "map", _json_type(value))
        return value

    def get_list(self, path: KeyPath) -> list[Any]:
        value = self._resolve(path)
        if not isinstance(value, list):
            raise TypeMismatch(self._label(_split(path)), "list", _json_type(value))
        return value

    def child(self, path: KeyPath) -> "Document":
        """Sub-document rooted at a map or list; error paths stay absolute."""
        value = self._resolve(path)
        if not isinstance(value, (dict, list)):
            raise TypeMismatch(
                self._label(_split(path)), "map or list", _json_type(value)
            )
        return Document(value, self._label(_split(path)))

    def children(self, path: KeyPath) -> list["Document"]:
        """One sub-document per element of the list at ``path``."""
        items = self.get_list(path)
        base = self._label(_split(path))
        return [Document(item, f"{base}.{i}") for i, item in enumerate(items)]
