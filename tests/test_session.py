"""Tests for sheetxml.services.session -- caller-owned conversion state."""

from __future__ import annotations

import pytest

from sheetxml.errors import (
    EmptySelection,
    ParseError,
    SessionNotFound,
    UnknownSheet,
    UnsupportedFormat,
)
from sheetxml.services.session import ConversionSession, SessionStore


@pytest.fixture
def loaded_session(make_xlsx) -> ConversionSession:
    session = ConversionSession()
    session.load(
        make_xlsx({
            "People": [["Name", "Age"], ["Alice", 30], [None, None], ["Bob", 41]],
            "Notes": [["Note"], ["hello"]],
        }),
        "report.xlsx",
    )
    return session


class TestLoad:
    def test_all_sheets_selected(self, loaded_session):
        assert loaded_session.selected == {"People", "Notes"}
        assert loaded_session.loaded

    def test_summaries(self, loaded_session):
        summaries = loaded_session.summaries()
        assert [(s.name, s.selected) for s in summaries] == [("People", True), ("Notes", True)]
        assert summaries[1].row_count == 1

    def test_reload_clears_output(self, loaded_session, sample_csv):
        loaded_session.convert()
        loaded_session.load(sample_csv, "people.csv")
        assert loaded_session.xml_output is None
        assert loaded_session.selected == {"Sheet1"}
        assert loaded_session.file_name == "people.csv"

    def test_unsupported_leaves_state(self, loaded_session):
        with pytest.raises(UnsupportedFormat):
            loaded_session.load(b"hello", "report.txt", "text/plain")
        assert loaded_session.file_name == "report.xlsx"
        assert [s.name for s in loaded_session.sheets] == ["People", "Notes"]

    def test_parse_error_unloads(self, loaded_session):
        with pytest.raises(ParseError):
            loaded_session.load(b"PK\x03\x04 broken", "broken.xlsx")
        assert not loaded_session.loaded
        assert loaded_session.sheets == []
        assert loaded_session.selected == set()


class TestSelection:
    def test_toggle(self, loaded_session):
        assert loaded_session.toggle("Notes") is False
        assert loaded_session.selected == {"People"}
        assert loaded_session.toggle("Notes") is True
        assert loaded_session.selected == {"People", "Notes"}

    def test_select_replaces(self, loaded_session):
        loaded_session.select(["Notes"])
        assert loaded_session.selected == {"Notes"}
        assert loaded_session.selected_count == 1

    def test_unknown_sheet(self, loaded_session):
        with pytest.raises(UnknownSheet):
            loaded_session.toggle("Missing")
        with pytest.raises(UnknownSheet):
            loaded_session.select(["People", "Missing"])
        assert loaded_session.selected == {"People", "Notes"}


class TestConvert:
    def test_convert_stores_output(self, loaded_session):
        xml = loaded_session.convert()
        assert loaded_session.xml_output == xml
        assert xml.count("<Sheet ") == 2
        assert xml.count("<Row>") == 3
        assert "<Age>30</Age>" in xml

    def test_selection_respected(self, loaded_session):
        loaded_session.toggle("People")
        xml = loaded_session.convert()
        assert '<Sheet name="People">' not in xml
        assert "<Note>hello</Note>" in xml

    def test_empty_selection_keeps_sheets(self, loaded_session):
        loaded_session.select([])
        with pytest.raises(EmptySelection):
            loaded_session.convert()
        assert loaded_session.xml_output is None
        assert len(loaded_session.sheets) == 2

        loaded_session.toggle("Notes")
        assert "<Note>hello</Note>" in loaded_session.convert()

    def test_toggle_discards_stale_output(self, loaded_session):
        loaded_session.convert()
        loaded_session.toggle("People")
        assert loaded_session.xml_output is None
        assert '<Sheet name="People">' not in loaded_session.convert()

    def test_select_discards_stale_output(self, loaded_session):
        loaded_session.convert()
        loaded_session.select(["Notes"])
        assert loaded_session.xml_output is None

    def test_rejected_selection_keeps_output(self, loaded_session):
        xml = loaded_session.convert()
        with pytest.raises(UnknownSheet):
            loaded_session.toggle("Missing")
        assert loaded_session.xml_output == xml

    def test_convert_without_file(self):
        with pytest.raises(EmptySelection):
            ConversionSession().convert()

    def test_download_name(self, loaded_session):
        assert loaded_session.download_name == "report.xml"

    def test_download_name_without_filename(self, sample_csv):
        session = ConversionSession()
        session.load(sample_csv, None, "text/csv")
        assert session.download_name == "output.xml"

    def test_reset(self, loaded_session):
        loaded_session.convert()
        loaded_session.reset()
        assert not loaded_session.loaded
        assert loaded_session.xml_output is None


class TestSessionStore:
    def test_create_and_get(self):
        store = SessionStore()
        session = store.create()
        assert store.get(session.session_id) is session
        assert len(store) == 1

    def test_missing(self):
        with pytest.raises(SessionNotFound):
            SessionStore().get("nope")

    def test_discard(self):
        store = SessionStore()
        session = store.create()
        store.discard(session.session_id)
        store.discard(session.session_id)
        with pytest.raises(SessionNotFound):
            store.get(session.session_id)
