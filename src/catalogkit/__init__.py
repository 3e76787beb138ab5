"""catalogkit - Gettext translation catalogs for Python.

Reads and writes binary ``.mo`` catalogs, parses ``.po`` text catalogs and
selects plural forms from ``Plural-Forms`` expressions without ``eval``.
"""

from catalogkit.api import (
    build_catalog_from_entries,
    compile_po,
    load_catalog,
    load_catalog_bytes,
)
from catalogkit.cache import (
    CatalogCache,
    EvictionPolicy,
    LRUPolicy,
    MtimePolicy,
    TTLPolicy,
    UnboundedPolicy,
)
from catalogkit.catalog import Catalog, CatalogMetadata, CatalogTable, TableEntry
from catalogkit.entry import (
    CONTEXT_SEPARATOR,
    PLURAL_SEPARATOR,
    CatalogEntry,
    make_key,
)
from catalogkit.exceptions import (
    CatalogError,
    CatalogIOError,
    DuplicateKeyError,
    ExpressionError,
    FormatError,
    POSyntaxError,
)
from catalogkit.mo import MOReader, MOWriter
from catalogkit.plural import PluralExpression, compile_plural, convert_ternary_operator
from catalogkit.po import POReader, parse_po

__version__ = "0.1.0"

__all__ = [
    # Main API
    "load_catalog",
    "load_catalog_bytes",
    "build_catalog_from_entries",
    "compile_po",
    # Catalogs
    "Catalog",
    "CatalogMetadata",
    "CatalogTable",
    "TableEntry",
    "CatalogEntry",
    "make_key",
    "CONTEXT_SEPARATOR",
    "PLURAL_SEPARATOR",
    # Caching
    "CatalogCache",
    "EvictionPolicy",
    "UnboundedPolicy",
    "LRUPolicy",
    "TTLPolicy",
    "MtimePolicy",
    # Codecs
    "MOReader",
    "MOWriter",
    "POReader",
    "parse_po",
    # Plural forms
    "PluralExpression",
    "compile_plural",
    "convert_ternary_operator",
    # Exceptions
    "CatalogError",
    "CatalogIOError",
    "FormatError",
    "POSyntaxError",
    "DuplicateKeyError",
    "ExpressionError",
]
