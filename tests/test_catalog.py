"""Tests for catalog queries and the main API."""

from __future__ import annotations

from pathlib import Path

import pytest

from catalogkit import (
    Catalog,
    CatalogEntry,
    CatalogIOError,
    CatalogMetadata,
    CatalogTable,
    DuplicateKeyError,
    FormatError,
    POReader,
    build_catalog_from_entries,
    compile_po,
    load_catalog,
    load_catalog_bytes,
    make_key,
)
from catalogkit.catalog import TableEntry
from catalogkit.entry import CONTEXT_SEPARATOR, split_key
from catalogkit.exceptions import ExpressionError


@pytest.fixture
def sample_catalog(sample_po_file: Path, tmp_path: Path) -> Catalog:
    output = tmp_path / "test.mo"
    compile_po([sample_po_file], output)
    return load_catalog(output)


class TestCatalogKeys:
    """Tests for key derivation."""

    def test_make_key(self):
        assert make_key("X") == "X"
        assert make_key("X", "ctx") == "ctx\x04X"
        assert make_key("X", "") == "\x04X"

    def test_split_key(self):
        assert split_key("ctx\x04X") == ("ctx", "X")
        assert split_key("X") == (None, "X")
        assert split_key(CONTEXT_SEPARATOR + "X") == ("", "X")

    def test_entry_strings(self):
        entry = CatalogEntry(msgid="a", msgid_plural="as", msgstr=["x", "y"], msgctxt="c")
        assert entry.key == "c\x04a"
        assert entry.original_text() == "a\x00as"
        assert entry.translation_text() == "x\x00y"
        assert entry.to_dict() == {
            "msgid": "a",
            "msgctxt": "c",
            "msgid_plural": "as",
            "msgstr": ["x", "y"],
        }


class TestCatalogMetadata:
    """Tests for header parsing."""

    def test_parse_header(self):
        metadata = CatalogMetadata.from_header(
            "Project-Id-Version: demo\n"
            "content-type: text/plain; charset=ISO-8859-2\n"
            "PLURAL-FORMS: nplurals=3; plural=(n==1 ? 0 : n>=2 && n<=4 ? 1 : 2);\n"
        )
        assert metadata.plural_count == 3
        assert metadata.charset == "ISO-8859-2"
        assert [metadata.plural_expr(n) for n in (1, 3, 7)] == [0, 1, 2]
        assert metadata.headers["project-id-version"] == "demo"

    def test_header_names_compared_literally(self):
        """Only the Plural-Forms header sets plural information."""
        metadata = CatalogMetadata.from_header(
            "X-Comment: nplurals=5; plural=n\nContent-Type: text/plain; nplurals=4\n"
        )
        assert metadata.plural_count == 2
        assert metadata.plural_expr is None
        assert metadata.charset is None

    def test_lines_without_colon_ignored(self):
        metadata = CatalogMetadata.from_header("garbage\n\nPlural-Forms: nplurals=1; plural=0;")
        assert metadata.plural_count == 1
        assert metadata.plural_expr(42) == 0

    def test_invalid_plural_expression(self):
        with pytest.raises(ExpressionError):
            CatalogMetadata.from_header("Plural-Forms: nplurals=2; plural=n.__class__;")

    def test_huge_plural_literal_is_expression_error(self):
        with pytest.raises(ExpressionError):
            CatalogMetadata.from_header("Plural-Forms: nplurals=2; plural=n==" + "9" * 5000 + ";")

    def test_metadata_is_immutable(self):
        metadata = CatalogMetadata.from_header("Language: de\n")
        with pytest.raises(TypeError):
            metadata.headers["language"] = "fr"


class TestCatalogQueries:
    """Tests for get_translation / get_plural_translation."""

    def test_translation(self, sample_catalog: Catalog):
        assert (
            sample_catalog.get_translation("Standard test: Lorem ipsum dolor sit amet.")
            == "STANDARD TEST: LOREM IPSUM DOLOR SIT AMET."
        )

    def test_missing_key_returns_original(self, sample_catalog: Catalog):
        assert sample_catalog.get_translation("unseen") == "unseen"
        assert sample_catalog.get_translation("unseen", "ctx") == "unseen"

    def test_contexts_are_independent(self, sample_catalog: Catalog):
        assert sample_catalog.get_translation("Context test", "Context 1") == "CONTEXT TEST 1"
        assert sample_catalog.get_translation("Context test", "Context 2") == "CONTEXT TEST 2"
        assert sample_catalog.get_translation("Context test", "") == "EMPTY CONTEXT TEST"
        assert sample_catalog.get_translation("Context test") == "NO CONTEXT TEST"
        assert sample_catalog.get_translation("Context test", "Context 3") == "Context test"

    def test_fuzzy_entry_not_compiled(self, sample_catalog: Catalog):
        assert sample_catalog.get_translation("Fuzzy test") == "Fuzzy test"

    def test_multi_line_entry(self, sample_catalog: Catalog):
        assert sample_catalog.get_translation('Multi-line test: "quoted"\n') == "MULTI-LINE\tTEST"

    @pytest.mark.parametrize(
        "count, expected",
        [
            (1, "Plural test: %d TEST."),
            (8, "Plural test: %d (EIGHT OR ELEVEN) TESTS."),
            (11, "Plural test: %d (EIGHT OR ELEVEN) TESTS."),
            (3, "Plural test: %d (THREE) TESTS."),
            (0, "Plural test: %d TESTS."),
            (100, "Plural test: %d TESTS."),
        ],
    )
    def test_plural_translation(self, sample_catalog: Catalog, count: int, expected: str):
        result = sample_catalog.get_plural_translation(
            "Plural test: %d test.", "Plural test: %d tests.", count
        )
        assert result == expected

    def test_plural_missing_key(self, sample_catalog: Catalog):
        assert sample_catalog.get_plural_translation("cat", "cats", 5) == "cats"
        assert sample_catalog.get_plural_translation("cat", "cats", 1) == "cat"

    def test_aliases(self, sample_catalog: Catalog):
        assert sample_catalog.translate("Context test") == "NO CONTEXT TEST"
        assert sample_catalog.translate_plural("cat", "cats", 2) == "cats"

    def test_metadata(self, sample_catalog: Catalog):
        assert sample_catalog.metadata.plural_count == 4
        assert sample_catalog.metadata.charset == "UTF-8"
        assert len(sample_catalog) == 7


class TestPluralFallbacks:
    """Tests for plural slot selection edge cases."""

    def make_catalog(self, header: str, plurals: tuple[str, ...]) -> Catalog:
        table = CatalogTable({"day": TableEntry(("days",), "Tag", plurals)})
        return Catalog(table, CatalogMetadata.from_header(header))

    def test_default_rule_without_header(self):
        catalog = self.make_catalog("", ("Tage",))
        assert catalog.get_plural_translation("day", "days", 1) == "Tag"
        assert catalog.get_plural_translation("day", "days", 0) == "Tage"
        assert catalog.get_plural_translation("day", "days", 2) == "Tage"

    def test_index_beyond_nplurals(self):
        catalog = self.make_catalog("Plural-Forms: nplurals=2; plural=n>5 ? 2 : n!=1;", ("Tage", "Tagen"))
        assert catalog.get_plural_translation("day", "days", 3) == "Tage"
        assert catalog.get_plural_translation("day", "days", 9) == "days"

    def test_missing_slot(self):
        catalog = self.make_catalog("Plural-Forms: nplurals=3; plural=n==1 ? 0 : n<5 ? 1 : 2;", ("Tage",))
        assert catalog.get_plural_translation("day", "days", 2) == "Tage"
        assert catalog.get_plural_translation("day", "days", 7) == "days"

    def test_empty_slot(self):
        catalog = self.make_catalog("", ("",))
        assert catalog.get_plural_translation("day", "days", 4) == "days"

    def test_evaluation_error_falls_back(self, caplog):
        catalog = self.make_catalog("Plural-Forms: nplurals=2; plural=1 / (n - 2);", ("Tage",))
        assert catalog.get_plural_translation("day", "days", 2) == "days"
        assert "Cannot select plural form" in caplog.text

    def test_empty_singular_translation(self):
        table = CatalogTable({"day": TableEntry((), "", ())})
        catalog = Catalog(table)
        assert catalog.get_translation("day") == "day"
        assert catalog.get_plural_translation("day", "days", 1) == "day"


class TestCatalogTable:
    """Tests for the mapping behaviour of CatalogTable."""

    def test_from_strings(self):
        table = CatalogTable.from_strings(
            [("a", "A"), ("c\x04a", "CA"), ("x\x00xs", "X\x00XS")]
        )
        assert set(table) == {"a", "c\x04a", "x"}
        assert table["x"].original_plurals == ("xs",)
        assert table.lookup("a", "c").translation_singular == "CA"

    def test_read_only(self):
        table = CatalogTable({"a": TableEntry()})
        with pytest.raises(TypeError):
            table["b"] = TableEntry()


class TestMainAPI:
    """Tests for load/build entry points."""

    def test_build_and_load_bytes(self):
        data = build_catalog_from_entries(
            [CatalogEntry(msgid="hello", msgstr="hallo"), CatalogEntry(msgid="", msgstr="Language: de\n")]
        )
        catalog = load_catalog_bytes(data)
        assert catalog.get_translation("hello") == "hallo"
        assert catalog.metadata.headers["language"] == "de"

    def test_build_duplicate_keys(self):
        with pytest.raises(DuplicateKeyError):
            build_catalog_from_entries(
                [CatalogEntry(msgid="a", msgctxt="c"), CatalogEntry(msgid="a", msgctxt="c")]
            )

    def test_po_round_trip(self, sample_po_file: Path):
        entries = POReader(sample_po_file).get_list()
        catalog = load_catalog_bytes(build_catalog_from_entries(entries, byteorder="big"))

        for entry in entries[1:]:
            if entry.msgid_plural is None:
                assert catalog.get_translation(entry.msgid, entry.msgctxt) == entry.msgstr
            else:
                for index, form in enumerate(entry.msgstr):
                    stored = catalog.table.lookup(entry.msgid, entry.msgctxt)
                    assert [stored.translation_singular, *stored.translation_plurals][index] == form

    def test_compile_multiple_po_files(self, tmp_path: Path):
        first = tmp_path / "a.po"
        second = tmp_path / "b.po"
        first.write_text('msgid "one"\nmsgstr "eins"\n', encoding="utf-8")
        second.write_text('#, fuzzy\nmsgid "two"\nmsgstr "zwei"\n', encoding="utf-8")

        output = tmp_path / "out.mo"
        assert compile_po([first, second], output) == 1
        assert compile_po([first, second], output, use_fuzzy=True) == 2
        assert load_catalog(output).get_translation("two") == "zwei"

    def test_load_missing_file(self, tmp_path: Path):
        with pytest.raises(CatalogIOError):
            load_catalog(tmp_path / "missing.mo")

    def test_load_non_catalog(self, tmp_path: Path):
        path = tmp_path / "bogus.mo"
        path.write_bytes(b"this is not a catalog at all")
        with pytest.raises(FormatError):
            load_catalog(path)
