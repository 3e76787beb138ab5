"""Reader for the Gettext text catalog (``.po``/``.pot``) format.

A PO file is a sequence of entries separated by blank lines::

    #, fuzzy
    msgctxt "menu"
    msgid "Open"
    msgstr ""
    "Öffnen"

    msgid "%d file"
    msgid_plural "%d files"
    msgstr[0] "%d Datei"
    msgstr[1] "%d Dateien"

Keyword values are C-style quoted strings; quoted lines that follow a
keyword line continue its value. Comments are ignored except ``#,`` flag
lines.

See: https://www.gnu.org/software/gettext/manual/gettext.html#PO-Files
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path

from catalogkit.entry import CatalogEntry
from catalogkit.exceptions import CatalogIOError, FormatError, POSyntaxError

logger = logging.getLogger(__name__)

KEYWORDS = frozenset({"msgctxt", "msgid", "msgid_plural", "msgstr"})

_PLURAL_MSGSTR_RE = re.compile(r"^msgstr\[(\d+)\]$")
_FLAG_SPLIT_RE = re.compile(r",\s*")
_LINE_SPLIT_RE = re.compile(r"\r\n|\r|\n")
_STRING_RE = re.compile(r'"((?:[^"\\]|\\.)*)"', re.DOTALL)
_ESCAPE_RE = re.compile(
    r"\\(?:(?P<simple>[abfnrtv])|(?P<octal>[0-7]{1,3})|x(?P<hex>[0-9A-Fa-f]{1,2})|(?P<other>.))",
    re.DOTALL,
)
_SIMPLE_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
}


def unescape(s: str) -> str:
    """Resolve C escape sequences (``\\n``, ``\\"``, ``\\101``, ``\\x41``...)."""

    def replace(match: re.Match) -> str:
        if match.group("simple"):
            return _SIMPLE_ESCAPES[match.group("simple")]
        if match.group("octal"):
            return chr(int(match.group("octal"), 8))
        if match.group("hex"):
            return chr(int(match.group("hex"), 16))
        return match.group("other")

    return _ESCAPE_RE.sub(replace, s)


def split_lines(text: str) -> list[str]:
    """Split on ``\\n``, ``\\r\\n`` and ``\\r`` only.

    Other characters :meth:`str.splitlines` treats as breaks (form feed,
    U+2028...) are ordinary string content in a PO file.
    """
    return _LINE_SPLIT_RE.split(text)


class POParser:
    """Line-oriented state machine producing :class:`CatalogEntry` objects.

    The parser keeps a pending string (the value of the last keyword, which
    may still grow by continuation lines) and a pending entry. The string is
    flushed into the entry when another keyword or a comment arrives; the
    entry is flushed into the result on a blank line or at end of input.
    """

    def __init__(self) -> None:
        self._list: list[CatalogEntry] = []
        self._line_number = 0
        self._keyword: str | None = None
        self._string: str | None = None
        self._entry: dict = {}
        self._flags: set[str] = set()

    def parse(self, lines: Iterable[str]) -> list[CatalogEntry]:
        """Parse all lines and return every entry, fuzzy ones included.

        Raises:
            POSyntaxError: If the input violates the PO grammar.
        """
        for line in lines:
            self._line_number += 1
            self._parse_line(line)
        self._flush_entry()
        return self._list

    def _error(self, message: str) -> POSyntaxError:
        return POSyntaxError(message, self._line_number)

    def _parse_line(self, line: str) -> None:
        line = line.strip(" \t\n\r\0\x0b\x0c")

        if not line:
            self._flush_entry()
        elif line[0] == "#":
            self._flush_string()
            if self._is_complete():
                self._flush_entry()
            if line.startswith("#,"):
                self._flags.update(f for f in _FLAG_SPLIT_RE.split(line[2:].strip()) if f)
        elif line[0] == '"':
            value = self._read_strings(line)
            if self._keyword is None:
                raise self._error("unexpected string")
            self._string += value
        else:
            self._flush_string()

            parts = line.split(None, 1)
            keyword = parts[0]
            if keyword not in KEYWORDS and not _PLURAL_MSGSTR_RE.match(keyword):
                raise self._error(f"unknown keyword {keyword!r}")
            if len(parts) < 2:
                raise self._error(f"missing value for {keyword}")
            value = self._read_strings(parts[1])

            if keyword in ("msgctxt", "msgid") and self._is_complete():
                self._flush_entry()

            self._keyword = keyword
            self._string = value

    def _read_strings(self, s: str) -> str:
        """Unescape and join the quoted strings making up ``s``.

        Adjacent strings on one line concatenate, so ``"a" "b"`` reads as
        ``ab``. Anything else outside the quotes is an error.
        """
        parts: list[str] = []
        pos = 0
        while pos < len(s):
            match = _STRING_RE.match(s, pos)
            if match is None:
                if s[pos] == '"':
                    raise self._error("unterminated string")
                raise self._error(f"unexpected text {s[pos:]!r}")
            parts.append(unescape(match.group(1)))
            pos = match.end()
            while pos < len(s) and s[pos] in " \t":
                pos += 1
        return "".join(parts)

    def _is_complete(self) -> bool:
        return "msgstr" in self._entry or "msgstr_forms" in self._entry

    def _flush_string(self) -> None:
        """Move the pending string into the pending entry."""
        if self._keyword is None:
            return

        match = _PLURAL_MSGSTR_RE.match(self._keyword)
        if match:
            if "msgstr" in self._entry:
                raise self._error("msgstr[N] mixed with msgstr")
            self._entry.setdefault("msgstr_forms", {})[int(match.group(1))] = self._string
        else:
            if self._keyword == "msgstr" and "msgstr_forms" in self._entry:
                raise self._error("msgstr mixed with msgstr[N]")
            self._entry[self._keyword] = self._string

        self._keyword = None
        self._string = None

    def _flush_entry(self) -> None:
        """Move the pending entry into the result list."""
        self._flush_string()

        if self._entry:
            entry = self._entry
            if "msgid" not in entry:
                raise self._error("missing msgid entry")
            if not self._is_complete():
                raise self._error("missing msgstr entry")

            msgid_plural = entry.get("msgid_plural")
            if "msgstr_forms" in entry:
                if msgid_plural is None:
                    raise self._error("msgstr[N] without msgid_plural")
                forms = entry["msgstr_forms"]
                msgstr: str | list[str] = [forms.get(i, "") for i in range(max(forms) + 1)]
            else:
                if msgid_plural is not None:
                    raise self._error("msgid_plural requires msgstr[N]")
                msgstr = entry["msgstr"]

            self._list.append(
                CatalogEntry(
                    msgid=entry["msgid"],
                    msgstr=msgstr,
                    msgid_plural=msgid_plural,
                    msgctxt=entry.get("msgctxt"),
                    flags=set(self._flags),
                )
            )

        self._entry = {}
        self._flags = set()


class POReader:
    """Reader for PO files.

    Example:
        >>> reader = POReader("de.po")
        >>> entries = reader.get_list()          # fuzzy entries excluded
        >>> POReader("de.po", use_fuzzy=True).get_list()
    """

    def __init__(
        self,
        path: str | Path,
        use_fuzzy: bool = False,
        encoding: str = "utf-8",
    ) -> None:
        """Read and parse a PO file.

        Args:
            path: The file to read.
            use_fuzzy: Include entries flagged ``fuzzy`` in :meth:`get_list`.
            encoding: Text encoding of the file.

        Raises:
            CatalogIOError: If the file cannot be read.
            FormatError: If the file does not decode with ``encoding``.
            POSyntaxError: If the file violates the PO grammar.
        """
        self.path: str | None = str(path)
        self.use_fuzzy = use_fuzzy
        try:
            with open(path, encoding=encoding) as f:
                text = f.read()
        except OSError as exc:
            raise CatalogIOError(path, f"Cannot open file ({exc.strerror})") from exc
        except UnicodeDecodeError as exc:
            raise FormatError(f"cannot decode {path} as {encoding}: {exc.reason}") from exc
        self._list = POParser().parse(split_lines(text))
        logger.debug("Parsed %d entries from %s", len(self._list), self.path)

    @classmethod
    def from_string(cls, text: str, use_fuzzy: bool = False) -> "POReader":
        """Parse PO text that is already in memory."""
        reader = cls.__new__(cls)
        reader.path = None
        reader.use_fuzzy = use_fuzzy
        reader._list = POParser().parse(split_lines(text))
        return reader

    def get_list(self) -> list[CatalogEntry]:
        """Return the parsed entries, without fuzzy ones unless requested."""
        if self.use_fuzzy:
            return list(self._list)
        return [entry for entry in self._list if not entry.fuzzy]

    def __len__(self) -> int:
        return len(self._list)


def parse_po(text: str, use_fuzzy: bool = False) -> list[CatalogEntry]:
    """Parse PO text into a list of entries."""
    return POReader.from_string(text, use_fuzzy=use_fuzzy).get_list()
