"""Edit the header block of a raw message without re-encoding it.

Header bytes are decoded as UTF-8 with ``surrogateescape``, so raw 8-bit
values (RFC 6532) and invalid bytes come back out unchanged. The body is
kept as bytes and never parsed.
"""

from __future__ import annotations

import re
from email.utils import quote
from typing import List, Optional

__all__ = ["RawHeaders", "format_address"]

_BLANK_LINE = re.compile(rb"\r?\n\r?\n")
_LINE_BREAK = re.compile(r"\r?\n")
_FOLD = re.compile(r"\r?\n(?=[ \t])")
_SPECIALS = re.compile(r'[][\\()<>@,:;".]')


def format_address(name: str, address: str) -> str:
    """Return ``name <address>``, quoting ``name`` only when RFC 5322 needs it.

    Unlike :func:`email.utils.formataddr` non-ASCII names are left as they
    are instead of being turned into encoded words.
    """
    if not name:
        return address
    if _SPECIALS.search(name):
        name = f'"{quote(name)}"'
    return f"{name} <{address}>"


class RawHeaders:
    """Header fields of a raw message, kept as the lines they arrived as."""

    def __init__(self, fields: List[List[str]], body: bytes, linesep: str):
        self.fields = fields
        self.body = body
        self.linesep = linesep

    @classmethod
    def from_bytes(cls, data: bytes) -> "RawHeaders":
        match = _BLANK_LINE.search(data)
        if match:
            head = data[: match.start()]
            end = match.end()
        else:
            head = data.rstrip(b"\r\n")
            end = len(data)
        linesep = "\r\n" if b"\r\n" in data[:end] else "\n"

        fields: List[List[str]] = []
        text = head.decode("utf-8", "surrogateescape")
        for line in _LINE_BREAK.split(text) if text else []:
            if line[:1] in (" ", "\t") and fields:
                fields[-1].append(line)
            else:
                fields.append([line])
        return cls(fields, data[len(head):], linesep)

    @staticmethod
    def _name(field: List[str]) -> str:
        return field[0].partition(":")[0].strip().lower()

    @staticmethod
    def _value(field: List[str]) -> str:
        raw = "\n".join(field).partition(":")[2]
        return _FOLD.sub("", raw).strip()

    def get_all(self, name: str) -> List[str]:
        """Return the unfolded values of every ``name`` header."""
        name = name.lower()
        return [self._value(f) for f in self.fields if self._name(f) == name]

    def get(self, name: str) -> Optional[str]:
        values = self.get_all(name)
        return values[0] if values else None

    def replace(self, name: str, value: str) -> None:
        """Set every ``name`` header to ``value``."""
        key = name.lower()
        self.fields = [
            [f"{name}: {value}"] if self._name(f) == key else f for f in self.fields
        ]

    def append(self, name: str, value: str) -> None:
        self.fields.append([f"{name}: {value}"])

    def remove(self, name: str) -> None:
        key = name.lower()
        self.fields = [f for f in self.fields if self._name(f) != key]

    def to_bytes(self) -> bytes:
        lines = [line for field in self.fields for line in field]
        head = self.linesep.join(lines).encode("utf-8", "surrogateescape")
        return head + self.body
