"""Tests for admin panel downloads and member recount."""
import csv
import io
from dataclasses import replace
from unittest.mock import patch

import httpx
import pytest
from openpyxl import load_workbook

from registration_portal.services.admin_service import search_records
from registration_portal.services.persistence_gateway import PersistenceGateway
from registration_portal.services.registration_service import AppState
from registration_portal.services.remote_client import RemoteClient
from registration_portal.ui.admin_panel import recount_members, render_downloads


@pytest.fixture
def records(sample_record):
    return [
        sample_record,
        replace(sample_record, id="AIMS00000002", full_name="Grace Hopper", email="grace@navy.mil"),
        replace(sample_record, id="AIMS00000003", full_name="Emmy Noether", email="emmy@math.de"),
    ]


def downloads_for(records, visible):
    """Render the download buttons and return their keyword arguments by key."""
    with patch("registration_portal.ui.admin_panel.st") as fake_st:
        render_downloads(records, visible)
    return {call.kwargs["key"]: call for call in fake_st.download_button.call_args_list}


def xlsx_names(data):
    sheet = load_workbook(io.BytesIO(data)).active
    return [row[4] for row in sheet.iter_rows(min_row=2, values_only=True)]


class TestRenderDownloads:
    """Downloads cover the whole collection, not the search results."""

    def test_search_does_not_shrink_full_exports(self, records):
        visible = search_records(records, "ada")
        buttons = downloads_for(records, visible)

        assert xlsx_names(buttons["download_all_xlsx"].kwargs["data"]) == [
            "Ada Lovelace", "Grace Hopper", "Emmy Noether",
        ]
        csv_rows = list(csv.DictReader(io.StringIO(buttons["download_all_csv"].kwargs["data"])))
        assert len(csv_rows) == 3

    def test_filtered_export_is_a_separate_labelled_option(self, records):
        visible = search_records(records, "ada")
        buttons = downloads_for(records, visible)

        filtered = buttons["download_filtered_xlsx"]
        assert "filtered" in filtered.args[0]
        assert "filtered" in filtered.kwargs["file_name"]
        assert xlsx_names(filtered.kwargs["data"]) == ["Ada Lovelace"]

    def test_no_filtered_option_without_a_filter(self, records):
        buttons = downloads_for(records, list(records))

        assert "download_filtered_xlsx" not in buttons
        assert buttons["download_all_xlsx"].kwargs["file_name"].endswith(".xlsx")
        assert buttons["download_all_xlsx"].kwargs["type"] == "primary"


class TestRecountMembers:
    """The displayed total after a local clear."""

    def test_remote_records_still_count(self, store, records):
        def handler(request):
            return httpx.Response(200, json={"students": [r.to_dict() for r in records]})

        remote = RemoteClient("https://script.example.com/exec", transport=httpx.MockTransport(handler))
        app_state = AppState(total_members=9)

        assert recount_members(app_state, PersistenceGateway(store, remote), baseline=0) == 3
        assert app_state.total_members == 3

    def test_local_only_falls_to_baseline(self, store, sample_record):
        store.append(sample_record)
        store.clear(confirmed=True)
        app_state = AppState(total_members=9)

        recount_members(app_state, PersistenceGateway(store), baseline=2)

        assert app_state.total_members == 2
