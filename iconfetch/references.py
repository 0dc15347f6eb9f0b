"""Charm reference parsing.

A reference has the form ``[schema:][~user/][series/]name[-revision]``. The
schema defaults to ``cs``. The reference's :attr:`CharmReference.path` drops the
schema and is the key used to deduplicate icon downloads.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from iconfetch.errors import ParseError

SCHEMAS = ("cs", "local")
DEFAULT_SCHEMA = "cs"

_USER_RE = re.compile(r"[a-z0-9][a-zA-Z0-9+.-]+")
_SERIES_RE = re.compile(r"[a-z]+(?:[a-z0-9]+)?")
_NAME_RE = re.compile(r"[a-z][a-z0-9]*(?:-[a-z0-9]*[a-z][a-z0-9]*)*")
_REVISION_RE = re.compile(r"(?P<name>.+)-(?P<revision>[0-9]+)")


@dataclass(frozen=True)
class CharmReference:
    schema: str
    name: str
    user: Optional[str] = None
    series: Optional[str] = None
    revision: Optional[int] = None

    @property
    def path(self) -> str:
        """Return the schema-less path, e.g. ``~bob/trusty/wordpress-3``."""

        parts = []
        if self.user:
            parts.append(f"~{self.user}")
        if self.series:
            parts.append(self.series)
        if self.revision is None:
            parts.append(self.name)
        else:
            parts.append(f"{self.name}-{self.revision}")
        return "/".join(parts)

    def __str__(self) -> str:
        return f"{self.schema}:{self.path}"


def parse_reference(raw: str) -> CharmReference:
    """Parse ``raw`` into a :class:`CharmReference` or raise :class:`ParseError`."""

    if not isinstance(raw, str) or not raw.strip():
        raise ParseError(str(raw), "empty charm reference")
    if raw != raw.strip():
        raise ParseError(raw, "charm reference has surrounding whitespace")

    schema, sep, rest = raw.partition(":")
    if not sep:
        schema, rest = DEFAULT_SCHEMA, raw
    if schema not in SCHEMAS:
        raise ParseError(raw, f"schema {schema!r} not recognized")

    parts = rest.split("/")
    user = None
    if parts[0].startswith("~"):
        if schema == "local":
            raise ParseError(raw, "local charm references cannot have a user")
        user = parts.pop(0)[1:]
        if not _USER_RE.fullmatch(user):
            raise ParseError(raw, f"invalid user name {user!r}")

    if len(parts) > 2:
        raise ParseError(raw, "too many path segments")

    series = None
    if len(parts) == 2:
        series = parts.pop(0)
        if not _SERIES_RE.fullmatch(series):
            raise ParseError(raw, f"invalid series {series!r}")

    name, revision = parts[0], None
    match = _REVISION_RE.fullmatch(name)
    if match:
        name, revision = match.group("name"), int(match.group("revision"))
    if not _NAME_RE.fullmatch(name):
        raise ParseError(raw, f"invalid charm name {name!r}")

    return CharmReference(schema=schema, name=name, user=user, series=series, revision=revision)


__all__ = ["CharmReference", "DEFAULT_SCHEMA", "SCHEMAS", "parse_reference"]
