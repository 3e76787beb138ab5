"""Translation entries and catalog keys."""

from __future__ import annotations

from dataclasses import dataclass, field

# Separator between the context and the message id in a catalog key
CONTEXT_SEPARATOR = "\x04"

# Separator between plural forms, in both originals and translations
PLURAL_SEPARATOR = "\x00"


def make_key(msgid: str, msgctxt: str | None = None) -> str:
    """Build the lookup key for a message id and optional context.

    Args:
        msgid: The message id.
        msgctxt: The context, or None. An empty context is a real context
            and is distinct from no context.

    Returns:
        ``msgctxt + CONTEXT_SEPARATOR + msgid`` or ``msgid``.
    """
    if msgctxt is None:
        return msgid
    return f"{msgctxt}{CONTEXT_SEPARATOR}{msgid}"


def split_key(key: str) -> tuple[str | None, str]:
    """Split a catalog key into ``(context, msgid)``."""
    context, sep, msgid = key.partition(CONTEXT_SEPARATOR)
    if not sep:
        return None, key
    return context, msgid


@dataclass
class CatalogEntry:
    """A single translation entry as found in a PO file.

    Attributes:
        msgid: The original (singular) message.
        msgstr: The translation. A single string, or a list of plural
            forms indexed by plural-form index when ``msgid_plural`` is set.
        msgid_plural: The original plural message, if any.
        msgctxt: The disambiguating context, if any.
        flags: Flags from ``#,`` comments, e.g. ``fuzzy``.
    """

    msgid: str
    msgstr: str | list[str] = ""
    msgid_plural: str | None = None
    msgctxt: str | None = None
    flags: set[str] = field(default_factory=set)

    @property
    def key(self) -> str:
        return make_key(self.msgid, self.msgctxt)

    @property
    def is_plural(self) -> bool:
        return self.msgid_plural is not None

    @property
    def fuzzy(self) -> bool:
        return "fuzzy" in self.flags

    @property
    def is_header(self) -> bool:
        return self.msgid == "" and self.msgctxt is None

    def original_text(self) -> str:
        """Return the original as stored in a binary catalog (without context)."""
        if self.msgid_plural is None:
            return self.msgid
        return f"{self.msgid}{PLURAL_SEPARATOR}{self.msgid_plural}"

    def translation_text(self) -> str:
        """Return the translation as stored in a binary catalog."""
        if isinstance(self.msgstr, str):
            return self.msgstr
        return PLURAL_SEPARATOR.join(self.msgstr)

    def to_dict(self) -> dict:
        result: dict = {"msgid": self.msgid}
        if self.msgctxt is not None:
            result["msgctxt"] = self.msgctxt
        if self.msgid_plural is not None:
            result["msgid_plural"] = self.msgid_plural
        result["msgstr"] = self.msgstr if isinstance(self.msgstr, str) else list(self.msgstr)
        if self.flags:
            result["flags"] = sorted(self.flags)
        return result
