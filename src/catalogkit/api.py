"""Main API functions for catalogkit."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from catalogkit.catalog import Catalog
from catalogkit.entry import CatalogEntry
from catalogkit.mo import MOWriter, decode_mo, read_mo
from catalogkit.po import POReader

logger = logging.getLogger(__name__)


def load_catalog(path: str | Path) -> Catalog:
    """Load a binary catalog file.

    Args:
        path: Resolved path of the ``.mo`` file.

    Returns:
        The loaded catalog.

    Raises:
        CatalogIOError: If the file cannot be read.
        FormatError: If the file is not a supported binary catalog.
        ExpressionError: If the header's plural expression is invalid.

    Example:
        >>> catalog = load_catalog("locale/de/LC_MESSAGES/messages.mo")
        >>> catalog.get_translation("Hello")
        'Hallo'
    """
    catalog = read_mo(path)
    logger.debug("Loaded %r", catalog)
    return catalog


def load_catalog_bytes(data: bytes) -> Catalog:
    """Load a binary catalog already held in memory."""
    return decode_mo(data)


def build_catalog_from_entries(
    entries: Iterable[CatalogEntry],
    encoding: str = "utf-8",
    byteorder: str = "little",
) -> bytes:
    """Serialize translation entries into binary catalog data.

    Raises:
        DuplicateKeyError: If two entries share context and message id.
    """
    writer = MOWriter(encoding=encoding, byteorder=byteorder)
    writer.add_list(entries)
    return writer.build()


def compile_po(
    po_paths: Iterable[str | Path],
    output: str | Path,
    use_fuzzy: bool = False,
    encoding: str = "utf-8",
    byteorder: str = "little",
) -> int:
    """Compile one or more PO files into a single binary catalog.

    Returns:
        The number of entries written.
    """
    writer = MOWriter(encoding=encoding, byteorder=byteorder)
    for po_path in po_paths:
        writer.add_list(POReader(po_path, use_fuzzy=use_fuzzy, encoding=encoding).get_list())
    writer.write(output)
    return len(writer.entries)
