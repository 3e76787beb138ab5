"""Shared fixtures for catalogkit tests."""

from __future__ import annotations

from pathlib import Path

import pytest

SAMPLE_PO = r'''# Test translation file.
msgid ""
msgstr ""
"Project-Id-Version: catalogkit tests\n"
"Content-Type: text/plain; charset=UTF-8\n"
"Plural-Forms: nplurals=4; plural=(n==1) ? 0 : (n==8 || n==11) ? 1 : (n==3) ? 2 : 3;\n"

msgid "Standard test: Lorem ipsum dolor sit amet."
msgstr "STANDARD TEST: LOREM IPSUM DOLOR SIT AMET."

msgid "Plural test: %d test."
msgid_plural "Plural test: %d tests."
msgstr[0] "Plural test: %d TEST."
msgstr[1] "Plural test: %d (EIGHT OR ELEVEN) TESTS."
msgstr[2] "Plural test: %d (THREE) TESTS."
msgstr[3] "Plural test: %d TESTS."

msgctxt "Context 1"
msgid "Context test"
msgstr "CONTEXT TEST 1"

msgctxt "Context 2"
msgid "Context test"
msgstr "CONTEXT TEST 2"

msgctxt ""
msgid "Context test"
msgstr "EMPTY CONTEXT TEST"

msgid "Context test"
msgstr "NO CONTEXT TEST"

#, fuzzy
msgid "Fuzzy test"
msgstr "FUZZY TEST"

msgid ""
"Multi-line "
"test: \"quoted\"\n"
msgstr "MULTI-LINE\tTEST"
'''


@pytest.fixture
def sample_po_text() -> str:
    return SAMPLE_PO


@pytest.fixture
def sample_po_file(tmp_path: Path) -> Path:
    path = tmp_path / "test.po"
    path.write_text(SAMPLE_PO, encoding="utf-8")
    return path
