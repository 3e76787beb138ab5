"""In-memory catalogs and the translation query API.

A :class:`Catalog` pairs a :class:`CatalogTable` (key -> translations) with
the :class:`CatalogMetadata` taken from the header pseudo-entry. Both are
built once at load time and never mutated afterwards, so a catalog can be
shared between threads without locking.

Usage:
    from catalogkit import load_catalog

    catalog = load_catalog("locale/de.mo")
    catalog.get_translation("File")                       # -> "Datei"
    catalog.get_plural_translation("%d file", "%d files", 3)  # -> "%d Dateien"
    catalog.get_translation("Open", context="menu")
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from catalogkit.entry import PLURAL_SEPARATOR, make_key, split_key
from catalogkit.exceptions import ExpressionError
from catalogkit.plural import (
    DEFAULT_PLURAL_COUNT,
    PluralExpression,
    compile_plural,
    select_plural,
)

logger = logging.getLogger(__name__)

_NPLURALS_RE = re.compile(r"^nplurals\s*=\s*(\d+)$", re.IGNORECASE)
_PLURAL_RE = re.compile(r"^plural\s*=(.+)$", re.IGNORECASE | re.DOTALL)
_CHARSET_RE = re.compile(r"^charset\s*=\s*(\S+)$", re.IGNORECASE)


# =============================================================================
# Metadata
# =============================================================================


@dataclass(frozen=True)
class CatalogMetadata:
    """Metadata from a catalog's header pseudo-entry.

    Attributes:
        plural_count: Number of plural forms (``nplurals``).
        plural_expr: Compiled ``plural=`` expression, or None for the
            default two-form rule.
        charset: Charset from ``Content-Type``, if declared.
        headers: Every ``Key: Value`` header line, keyed by lower-cased name.
    """

    plural_count: int = DEFAULT_PLURAL_COUNT
    plural_expr: PluralExpression | None = None
    charset: str | None = None
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_header(cls, text: str) -> "CatalogMetadata":
        """Parse the translation of the header pseudo-entry.

        Only ``Plural-Forms`` and ``Content-Type`` carry meaning; other lines
        are kept in :attr:`headers` and otherwise ignored.

        Raises:
            ExpressionError: If the ``plural=`` expression is invalid.
        """
        plural_count = DEFAULT_PLURAL_COUNT
        plural_expr = None
        charset = None
        headers: dict[str, str] = {}

        for line in text.split("\n"):
            if ":" not in line:
                continue
            name, value = line.split(":", 1)
            name = name.strip().lower()
            value = value.strip()
            headers[name] = value

            if name == "plural-forms":
                for part in value.split(";"):
                    part = part.strip()
                    if match := _NPLURALS_RE.match(part):
                        plural_count = int(match.group(1))
                    elif match := _PLURAL_RE.match(part):
                        plural_expr = compile_plural(match.group(1))
            elif name == "content-type":
                for part in value.split(";"):
                    if match := _CHARSET_RE.match(part.strip()):
                        charset = match.group(1)

        return cls(
            plural_count=plural_count,
            plural_expr=plural_expr,
            charset=charset,
            headers=MappingProxyType(headers),
        )


# =============================================================================
# Table
# =============================================================================


@dataclass(frozen=True)
class TableEntry:
    """Translations stored under one catalog key.

    Attributes:
        original_plurals: Plural forms of the original (informational).
        translation_singular: The translation for plural-form index 0.
        translation_plurals: Translations for plural-form indexes 1..N-1.
    """

    original_plurals: tuple[str, ...] = ()
    translation_singular: str = ""
    translation_plurals: tuple[str, ...] = ()


class CatalogTable(Mapping):
    """Read-only mapping from catalog key to :class:`TableEntry`."""

    def __init__(self, entries: Mapping[str, TableEntry] | None = None) -> None:
        self._entries: dict[str, TableEntry] = dict(entries or {})

    @classmethod
    def from_strings(cls, pairs: Iterable[tuple[str, str]]) -> "CatalogTable":
        """Build a table from decoded ``(original, translation)`` pairs.

        The original may hold a context before the context separator and
        plural forms after plural separators; the translation may hold
        plural forms after plural separators. A later pair with the same
        key replaces an earlier one.
        """
        entries: dict[str, TableEntry] = {}
        for original, translation in pairs:
            context, message = split_key(original)
            original_singular, *original_plurals = message.split(PLURAL_SEPARATOR)
            translation_singular, *translation_plurals = translation.split(PLURAL_SEPARATOR)
            entries[make_key(original_singular, context)] = TableEntry(
                original_plurals=tuple(original_plurals),
                translation_singular=translation_singular,
                translation_plurals=tuple(translation_plurals),
            )
        return cls(entries)

    def lookup(self, original: str, context: str | None = None) -> TableEntry | None:
        return self._entries.get(make_key(original, context))

    def __getitem__(self, key: str) -> TableEntry:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"CatalogTable({len(self._entries)} entries)"


# =============================================================================
# Catalog
# =============================================================================


class Catalog:
    """A loaded translation catalog.

    Lookups never raise: a missing translation yields the original string.
    """

    def __init__(
        self,
        table: CatalogTable,
        metadata: CatalogMetadata | None = None,
        source: str | None = None,
    ) -> None:
        self._table = table
        self._metadata = metadata or CatalogMetadata()
        self._source = source

    @property
    def table(self) -> CatalogTable:
        return self._table

    @property
    def metadata(self) -> CatalogMetadata:
        return self._metadata

    @property
    def source(self) -> str | None:
        """Path the catalog was loaded from, if any."""
        return self._source

    def plural_index(self, count: int) -> int:
        """Return the plural-form index selected for ``count``.

        Raises:
            ExpressionError: If the plural expression cannot be evaluated.
        """
        return select_plural(self._metadata.plural_expr, count)

    def get_translation(self, original: str, context: str | None = None) -> str:
        """Obtain the translation of a message.

        Args:
            original: The message id.
            context: The context, or None.

        Returns:
            The translated string, or ``original`` if there is none.
        """
        entry = self._table.lookup(original, context)
        if entry is not None and entry.translation_singular:
            return entry.translation_singular
        return original

    def get_plural_translation(
        self,
        original_singular: str,
        original_plural: str,
        count: int,
        context: str | None = None,
    ) -> str:
        """Obtain the translation of a message with a plural form.

        Args:
            original_singular: The message id.
            original_plural: The plural form of ``original_singular``.
            count: The number that selects the form.
            context: The context, or None.

        Returns:
            The translated form for ``count``, or ``original_singular`` /
            ``original_plural`` (by ``count == 1``) if there is none.
        """
        entry = self._table.lookup(original_singular, context)
        if entry is not None:
            try:
                index = self.plural_index(count)
            except ExpressionError as exc:
                logger.warning(
                    "Cannot select plural form for count %r in %s: %s",
                    count,
                    self._source or "catalog",
                    exc,
                )
                index = -1

            if index == 0:
                if entry.translation_singular:
                    return entry.translation_singular
            elif 0 < index < self._metadata.plural_count:
                plurals = entry.translation_plurals
                if index - 1 < len(plurals) and plurals[index - 1]:
                    return plurals[index - 1]

        return original_singular if count == 1 else original_plural

    translate = get_translation
    translate_plural = get_plural_translation

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, key: object) -> bool:
        return key in self._table

    def __repr__(self) -> str:
        source = f" from {self._source}" if self._source else ""
        return f"<Catalog{source}: {len(self._table)} entries>"
