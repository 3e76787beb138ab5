"""Reader and writer for the Gettext binary catalog (``.mo``) format.

Layout of a revision 0 file (all integers 32-bit, in the byte order
announced by the magic number)::

    0   magic            0x950412de
    4   revision         0
    8   count            number of strings
    12  originals_pos    offset of the originals table
    16  translations_pos offset of the translations table
    20  hash_size        size of the hash table (unused here)
    24  hash_pos         offset of the hash table (unused here)

Both tables hold ``count`` ``(length, offset)`` pairs; entry *i* of the
originals table and entry *i* of the translations table describe the same
message. Strings are NUL-terminated in the file, but ``length`` excludes
the terminator.

See: https://www.gnu.org/software/gettext/manual/gettext.html#MO-Files
"""

from __future__ import annotations

import codecs
import logging
import struct
from collections.abc import Iterable
from pathlib import Path

from catalogkit.catalog import Catalog, CatalogMetadata, CatalogTable
from catalogkit.entry import CONTEXT_SEPARATOR, PLURAL_SEPARATOR, CatalogEntry
from catalogkit.exceptions import (
    CatalogIOError,
    DuplicateKeyError,
    FormatError,
)

logger = logging.getLogger(__name__)

MAGIC = 0x950412DE
MAGIC_BIG_ENDIAN = b"\x95\x04\x12\xde"
MAGIC_LITTLE_ENDIAN = b"\xde\x12\x04\x95"

HEADER_SIZE = 28
OFFSET_ENTRY_SIZE = 8

DEFAULT_CHARSET = "utf-8"

_BYTEORDER_PREFIX = {"little": "<", "big": ">"}


# =============================================================================
# Reader
# =============================================================================


class MOReader:
    """Decoder for binary catalogs held in a single in-memory buffer.

    Strings are located by slicing the buffer with the offsets and lengths
    recorded in the two offset tables; every slice is bounds-checked.

    Example:
        >>> reader = MOReader(Path("de.mo").read_bytes())
        >>> table, metadata = reader.read()
    """

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self.byteorder = self._detect_byteorder()
        self._prefix = _BYTEORDER_PREFIX[self.byteorder]

        if len(self._data) < HEADER_SIZE:
            raise FormatError("truncated header")

        (
            self.revision,
            self.count,
            self.originals_pos,
            self.translations_pos,
            self.hash_size,
            self.hash_pos,
        ) = struct.unpack_from(f"{self._prefix}6I", self._data, 4)

        if self.revision != 0:
            raise FormatError(f"unsupported revision {self.revision}")

    @classmethod
    def from_file(cls, path: str | Path) -> "MOReader":
        """Read a binary catalog file into a reader.

        Raises:
            CatalogIOError: If the file cannot be read.
            FormatError: If the file is not a supported binary catalog.
        """
        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as exc:
            raise CatalogIOError(path, f"Cannot open file ({exc.strerror})") from exc
        return cls(data)

    def _detect_byteorder(self) -> str:
        magic = self._data[:4]
        if magic == MAGIC_BIG_ENDIAN:
            return "big"
        if magic == MAGIC_LITTLE_ENDIAN:
            return "little"
        raise FormatError("not a gettext binary catalog")

    def _read_offset_table(self, position: int) -> list[tuple[int, int]]:
        end = position + self.count * OFFSET_ENTRY_SIZE
        if end > len(self._data):
            raise FormatError(f"offset table at {position} extends past end of data")
        return [
            struct.unpack_from(f"{self._prefix}2I", self._data, position + i * OFFSET_ENTRY_SIZE)
            for i in range(self.count)
        ]

    def _slice(self, length: int, offset: int) -> bytes:
        if offset + length > len(self._data):
            raise FormatError(
                f"string at offset {offset} with length {length} extends past end of data"
            )
        return self._data[offset : offset + length]

    def read_strings(self) -> list[tuple[bytes, bytes]]:
        """Return raw ``(original, translation)`` byte strings in entry order."""
        originals = self._read_offset_table(self.originals_pos)
        translations = self._read_offset_table(self.translations_pos)
        return [
            (self._slice(*original), self._slice(*translation))
            for original, translation in zip(originals, translations)
        ]

    def read(self) -> tuple[CatalogTable, CatalogMetadata]:
        """Decode the buffer into a table and header metadata.

        Raises:
            FormatError: If offsets are out of range or strings do not decode.
            ExpressionError: If the header's plural expression is invalid.
        """
        strings = self.read_strings()

        metadata = CatalogMetadata()
        charset = DEFAULT_CHARSET
        for original, translation in strings:
            if original == b"":
                # The charset is only known after parsing, so peek with latin-1
                peek = CatalogMetadata.from_header(translation.decode("latin-1"))
                charset = _resolve_charset(peek.charset)
                metadata = CatalogMetadata.from_header(_decode(translation, charset))
                break

        pairs = [
            (_decode(original, charset), _decode(translation, charset))
            for original, translation in strings
            if original != b""
        ]
        table = CatalogTable.from_strings(pairs)

        logger.debug(
            "Decoded %d strings (%s-endian, charset %s, nplurals %d)",
            len(strings),
            self.byteorder,
            charset,
            metadata.plural_count,
        )
        return table, metadata


def _resolve_charset(charset: str | None) -> str:
    if charset is None:
        return DEFAULT_CHARSET
    try:
        codecs.lookup(charset)
    except LookupError:
        logger.warning("Unknown charset %r, decoding as %s", charset, DEFAULT_CHARSET)
        return DEFAULT_CHARSET
    return charset


def _decode(data: bytes, charset: str) -> str:
    try:
        return data.decode(charset)
    except UnicodeDecodeError as exc:
        raise FormatError(f"cannot decode string as {charset}: {exc.reason}") from exc


def decode_mo(data: bytes, source: str | None = None) -> Catalog:
    """Decode binary catalog data into a :class:`Catalog`."""
    table, metadata = MOReader(data).read()
    return Catalog(table, metadata, source=source)


def read_mo(path: str | Path) -> Catalog:
    """Load a binary catalog file into a :class:`Catalog`."""
    table, metadata = MOReader.from_file(path).read()
    return Catalog(table, metadata, source=str(path))


# =============================================================================
# Writer
# =============================================================================


def _check_separators(entry: CatalogEntry) -> None:
    """Reject strings the reader would split differently than written.

    Raises:
        FormatError: If a key part holds a separator or a translation
            form holds a NUL.
    """
    for name, value in (
        ("msgctxt", entry.msgctxt),
        ("msgid", entry.msgid),
        ("msgid_plural", entry.msgid_plural),
    ):
        if value is not None and (CONTEXT_SEPARATOR in value or PLURAL_SEPARATOR in value):
            raise FormatError(f"{name} {value!r} contains a separator character")

    forms = [entry.msgstr] if isinstance(entry.msgstr, str) else entry.msgstr
    if any(PLURAL_SEPARATOR in form for form in forms):
        raise FormatError(f"translation of {entry.msgid!r} contains a NUL character")


class MOWriter:
    """Serializer from translation entries to the binary catalog format.

    Entries are sorted by key byte order and written without a hash table.

    Example:
        >>> writer = MOWriter()
        >>> writer.add_list(POReader("de.po").get_list())
        >>> writer.write("de.mo")
    """

    def __init__(self, encoding: str = DEFAULT_CHARSET, byteorder: str = "little") -> None:
        if byteorder not in _BYTEORDER_PREFIX:
            raise ValueError(f"byteorder must be 'little' or 'big', got {byteorder!r}")
        self.encoding = encoding
        self.byteorder = byteorder
        self._list: list[CatalogEntry] = []

    @property
    def entries(self) -> list[CatalogEntry]:
        return list(self._list)

    def add_list(self, entries: Iterable[CatalogEntry]) -> None:
        """Add a batch of entries.

        Batches are concatenated; duplicate keys are detected when building.
        """
        self._list.extend(entries)

    def _encode(self, text: str) -> bytes:
        try:
            return text.encode(self.encoding)
        except UnicodeEncodeError as exc:
            raise FormatError(f"cannot encode string as {self.encoding}: {exc.reason}") from exc

    def _create_entry_table(self) -> list[tuple[bytes, CatalogEntry]]:
        """Map each encoded key to its entry, sorted by key bytes.

        Raises:
            DuplicateKeyError: If two entries share a key.
        """
        table: dict[bytes, CatalogEntry] = {}
        for entry in self._list:
            _check_separators(entry)
            key = self._encode(entry.key)
            if key in table:
                raise DuplicateKeyError(entry.msgid, entry.msgctxt)
            table[key] = entry
        return sorted(table.items())

    def build(self) -> bytes:
        """Build the binary catalog from the current entries.

        Raises:
            DuplicateKeyError: If two entries share a key.
            FormatError: If a string cannot be encoded.
        """
        entry_table = self._create_entry_table()

        # 1. Build strings
        originals: list[bytes] = []
        translations: list[bytes] = []
        for key, entry in entry_table:
            original = key
            if entry.msgid_plural is not None:
                original += b"\x00" + self._encode(entry.msgid_plural)
            originals.append(original)
            translations.append(self._encode(entry.translation_text()))

        # 2. Calculate offsets
        count = len(entry_table)
        prefix = _BYTEORDER_PREFIX[self.byteorder]
        originals_pos = HEADER_SIZE
        translations_pos = originals_pos + count * OFFSET_ENTRY_SIZE
        strings_pos = translations_pos + count * OFFSET_ENTRY_SIZE

        # 3. Build header
        header = struct.pack(
            f"{prefix}7I", MAGIC, 0, count, originals_pos, translations_pos, 0, 0
        )

        # 4. Build offset tables and string pools
        offset_tables: list[bytes] = []
        pools: list[bytes] = []
        for strings in (originals, translations):
            table = bytearray()
            for s in strings:
                table += struct.pack(f"{prefix}2I", len(s), strings_pos)
                strings_pos += len(s) + 1
            offset_tables.append(bytes(table))
            pools.append(b"".join(s + b"\x00" for s in strings))

        logger.debug("Built binary catalog with %d entries (%s-endian)", count, self.byteorder)
        return header + b"".join(offset_tables) + b"".join(pools)

    def write(self, path: str | Path) -> None:
        """Build the binary catalog and write it to ``path``.

        Raises:
            CatalogIOError: If the file cannot be written.
        """
        data = self.build()
        try:
            with open(path, "wb") as f:
                f.write(data)
        except OSError as exc:
            raise CatalogIOError(path, f"Cannot write file ({exc.strerror})") from exc
        logger.debug("Wrote %d bytes to %s", len(data), path)
