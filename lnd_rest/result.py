"""
Decoded JSON responses with path-based field lookup.

LND's REST gateway returns loosely-shaped JSON (int64 fields arrive as
strings, empty fields are omitted), so results are kept as generic JSON and
queried by path instead of being forced into fixed structs.

Path syntax:
    "alias"                  object key
    "local_balance.sat"      nested keys
    "invoices.0.memo"        array index
    "invoices.#"             array (or object) length
    "features.9\\.x"         a literal dot inside a key is escaped with a backslash
"""

from __future__ import annotations

import json
from typing import Any, Iterator, List, Optional

_MISSING = object()


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not JSON; encode side uses allow_nan=False too
    raise ValueError(f"{name} is not valid JSON")


json_decoder = json.JSONDecoder(parse_constant=_reject_constant)


def split_path(path: str) -> List[str]:
    """Split a dotted path into components, honouring ``\\.`` escapes."""
    parts: List[str] = []
    current: List[str] = []
    escaped = False
    for ch in path:
        if escaped:
            current.append(ch)
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == ".":
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    parts.append("".join(current))
    return parts


def _step(value: Any, key: str) -> Any:
    if key == "#":
        if isinstance(value, (list, dict)):
            return len(value)
        return _MISSING
    if isinstance(value, dict):
        return value.get(key, _MISSING)
    if isinstance(value, list):
        try:
            idx = int(key)
        except ValueError:
            return _MISSING
        if 0 <= idx < len(value):
            return value[idx]
    return _MISSING


class JsonResult:
    """
    A decoded JSON value.

    ``get(path)`` always returns another JsonResult, so lookups chain
    without checks; ``exists`` tells whether the path was present.
    """

    __slots__ = ("_value", "status_code")

    def __init__(self, value: Any = _MISSING, status_code: Optional[int] = None):
        self._value = value
        self.status_code = status_code

    @classmethod
    def parse(cls, text: str, status_code: Optional[int] = None) -> "JsonResult":
        """Parse JSON text. Raises ``ValueError`` on bad input, including NaN and Infinity."""
        return cls(json_decoder.decode(text), status_code=status_code)

    @property
    def exists(self) -> bool:
        return self._value is not _MISSING

    @property
    def value(self) -> Any:
        """The raw Python value, or None if the path was absent."""
        return None if self._value is _MISSING else self._value

    def get(self, path: str) -> "JsonResult":
        """Look up a dotted path. Absent paths give a result with ``exists == False``."""
        current = self._value
        for key in split_path(path):
            if current is _MISSING:
                break
            current = _step(current, key)
        return JsonResult(current)

    # --- conversions (lenient, like LND's own JSON encoding) ---

    def as_str(self, default: str = "") -> str:
        if not self.exists or self._value is None:
            return default
        if isinstance(self._value, str):
            return self._value
        if isinstance(self._value, bool):
            return "true" if self._value else "false"
        if isinstance(self._value, (dict, list)):
            return json.dumps(self._value, separators=(",", ":"))
        return str(self._value)

    def as_int(self, default: int = 0) -> int:
        v = self._value
        if isinstance(v, bool):
            return int(v)
        if isinstance(v, int):
            return v
        if isinstance(v, float):
            try:
                return int(v)
            except (ValueError, OverflowError):
                return default
        if isinstance(v, str):
            try:
                return int(v)
            except ValueError:
                try:
                    return int(float(v))
                except (ValueError, OverflowError):
                    return default
        return default

    def as_float(self, default: float = 0.0) -> float:
        v = self._value
        if isinstance(v, (int, float)):
            return float(v)
        if isinstance(v, str):
            try:
                return float(v)
            except ValueError:
                return default
        return default

    def as_bool(self, default: bool = False) -> bool:
        v = self._value
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            return v.lower() in ("true", "1")
        if isinstance(v, (int, float)):
            return v != 0
        return default

    def as_list(self) -> List["JsonResult"]:
        """Array elements as JsonResults; empty for non-arrays."""
        if isinstance(self._value, list):
            return [JsonResult(item) for item in self._value]
        return []

    # --- container protocol over the raw value ---

    def __getitem__(self, path: str) -> Any:
        found = self.get(path)
        if not found.exists:
            raise KeyError(path)
        return found.value

    def __contains__(self, path: str) -> bool:
        return self.get(path).exists

    def __iter__(self) -> Iterator[JsonResult]:
        return iter(self.as_list())

    def __bool__(self) -> bool:
        return self.exists

    def __eq__(self, other: object) -> bool:
        if isinstance(other, JsonResult):
            return self._value == other._value
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        if not self.exists:
            return "JsonResult(<missing>)"
        return f"JsonResult({self._value!r})"
