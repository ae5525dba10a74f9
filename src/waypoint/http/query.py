"""Immutable query string parameters.

Implements ``Mapping[str, str]``: ``__getitem__`` returns the first value for
a name, ``get_list`` returns all of them.  A name may legitimately be absent.
"""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qs, urlencode


class QueryParams(Mapping[str, str]):
    """Immutable query string parameters.

    Attributes:
        _data: Parsed query string as name -> list of values.
        _raw: Raw query string, without the leading ``?``.
    """

    _data: dict[str, list[str]]
    _raw: str

    __slots__ = ("_data", "_raw")

    def __init__(self, query_string: str = "") -> None:
        raw = query_string.removeprefix("?")
        object.__setattr__(self, "_raw", raw)
        object.__setattr__(self, "_data", parse_qs(raw, keep_blank_values=True))

    @classmethod
    def from_mapping(cls, values: Mapping[str, str | list[str]]) -> "QueryParams":
        """Build from a plain mapping; list values become repeated names."""
        return cls(urlencode(dict(values), doseq=True))

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, QueryParams):
            return self._data == other._data
        return NotImplemented

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"QueryParams({{{items}}})"

    @property
    def raw(self) -> str:
        """The query string as given, without the leading ``?``."""
        return self._raw

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        values = self._data.get(key)
        if values:
            return values[0]
        return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return list(self._data.get(key, []))
