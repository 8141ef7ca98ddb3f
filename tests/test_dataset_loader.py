from __future__ import annotations

import io
import logging
import zipfile
from pathlib import Path
from typing import Any

import pandas as pd
import pytest
import requests
from openpyxl import Workbook

from results_portal.ingest.errors import LoadError, LoadErrorKind
from results_portal.ingest.loader import fetch_resource, load_dataset, parse_table
from results_portal.lookup.matcher import match_record
from results_portal.settings import PortalSettings

FIXTURE_PATH = Path(__file__).resolve().parent / "resources" / "result_sample.csv"


class _FakeHttpClient:
    def __init__(self, payload: bytes | None = None, error: Exception | None = None) -> None:
        self.payload = payload
        self.error = error
        self.requested: list[str] = []

    def get_bytes(self, url: str) -> bytes:
        self.requested.append(url)
        if self.error is not None:
            raise self.error
        assert self.payload is not None
        return self.payload

    def close(self) -> None:  # pragma: no cover - caller-owned clients are never closed
        raise AssertionError("Loader must not close a client it did not create")


def test_csv_fixture_loads_into_canonical_records_in_source_order() -> None:
    records = load_dataset(str(FIXTURE_PATH))

    assert [(record.name, record.category) for record in records] == [
        ("Sara", "G1"),
        ("Omar", "G2"),
        ("Lina", "G1"),
        ("Sara", "G2"),
    ]
    sara = records[0]
    assert sara.birth_date == "2010-05-01"
    assert sara.phone == "0791234567"
    assert sara.score1 == "88"
    assert sara.score2 == "90"
    assert dict(sara.extras) == {"ملاحظات": "ممتاز"}

    omar = records[1]
    assert omar.phone == "0788 555 111"
    assert dict(omar.extras) == {"ملاحظات": ""}


def test_loading_the_same_payload_twice_is_deterministic() -> None:
    first = [record.to_dict() for record in load_dataset(str(FIXTURE_PATH))]
    second = [record.to_dict() for record in load_dataset(str(FIXTURE_PATH))]

    assert first == second


def _write_workbook(path: Path, header: list[Any], *rows: list[Any]) -> Path:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "results"
    sheet.append(header)
    for row in rows:
        sheet.append(row)
    archive = workbook.create_sheet("archive")
    archive.append(["name", "className"])
    archive.append(["Ghost", "G9"])
    workbook.save(path)
    return path


def _corrupt_first_sheet(path: Path) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(path) as source, zipfile.ZipFile(buffer, "w") as target:
        for item in source.infolist():
            if item.filename == "xl/worksheets/sheet1.xml":
                target.writestr(item.filename, b"<worksheet><sheetData><row")
            else:
                target.writestr(item, source.read(item.filename))
    return buffer.getvalue()


def test_workbook_first_sheet_is_parsed_with_serial_dates_and_numeric_phones(tmp_path: Path) -> None:
    workbook_path = _write_workbook(
        tmp_path / "result.xlsx",
        ["name", "className", "br-date", "mobile1", "Score 1", "Score 2"],
        ["Sara", "G1", 40299, 791234567, 88, 90],
        ["Omar", "G2", "2009-11-20", "0788555111", 75, None],
    )

    records = load_dataset(str(workbook_path))

    assert [record.name for record in records] == ["Sara", "Omar"]
    assert records[0].birth_date == "2010-05-01"
    assert records[0].phone == "791234567"
    assert records[0].score1 == 88
    assert records[1].birth_date == "2009-11-20"
    assert records[1].phone == "0788555111"
    assert records[1].score2 is None


def test_workbook_text_phone_keeps_leading_zero_and_matches(tmp_path: Path) -> None:
    workbook_path = _write_workbook(
        tmp_path / "result.xlsx",
        ["name", "className", "br-date", "mobile1"],
        ["Sara", "G1", "2010-05-01", "0791234567"],
    )

    records = load_dataset(str(workbook_path))

    assert records[0].phone == "0791234567"
    assert match_record(records, "G1", "Sara", "2010-05-01", "079123") is records[0]


def test_workbook_na_like_text_is_kept_verbatim(tmp_path: Path) -> None:
    workbook_path = _write_workbook(
        tmp_path / "result.xlsx",
        ["name", "className", "mobile1", "Notes", "Remark"],
        ["NA", "G1", "0791234567", "N/A", "null"],
    )

    record = load_dataset(str(workbook_path))[0]

    assert record.name == "NA"
    assert dict(record.extras) == {"Notes": "N/A", "Remark": "null"}


def test_workbook_scores_keep_their_integer_type_next_to_empty_cells(tmp_path: Path) -> None:
    workbook_path = _write_workbook(
        tmp_path / "result.xlsx",
        ["name", "className", "Score 1", "Score 2"],
        ["Sara", "G1", 88, 90],
        ["Omar", "G2", 75, None],
    )

    sara, omar = load_dataset(str(workbook_path))

    assert sara.score2 == 90
    assert isinstance(sara.score2, int)
    assert isinstance(omar.score1, int)
    assert omar.score2 is None


def test_workbook_blank_and_repeated_headers_get_distinct_labels(tmp_path: Path) -> None:
    workbook_path = _write_workbook(
        tmp_path / "result.xlsx",
        ["name", None, "Room", "Room"],
        ["Sara", "x", "B2", "B3"],
    )

    rows = parse_table(workbook_path.read_bytes())

    assert rows == [{"name": "Sara", "Unnamed: 1": "x", "Room": "B2", "Room.1": "B3"}]


def test_workbook_with_corrupt_sheet_xml_is_a_malformed_error(tmp_path: Path) -> None:
    workbook_path = _write_workbook(tmp_path / "result.xlsx", ["name", "className"], ["Sara", "G1"])
    payload = _corrupt_first_sheet(workbook_path)

    with pytest.raises(LoadError) as excinfo:
        parse_table(payload)

    assert excinfo.value.kind is LoadErrorKind.MALFORMED


def test_workbook_date_cells_render_as_iso_dates(tmp_path: Path) -> None:
    workbook_path = tmp_path / "dates.xlsx"
    pd.DataFrame(
        {"name": ["Lina"], "className": ["G1"], "br-date": [pd.Timestamp("2010-02-14")], "mobile1": ["0799000111"]}
    ).to_excel(workbook_path, index=False, engine="openpyxl")

    records = load_dataset(str(workbook_path))

    assert records[0].birth_date == "2010-02-14"


def test_http_locations_are_fetched_through_the_client() -> None:
    client = _FakeHttpClient(payload="name,className,br-date,mobile1\nSara,G1,2010-05-01,0791234567\n".encode("utf-8"))

    records = load_dataset("https://results.example.org/result.csv", http_client=client)

    assert client.requested == ["https://results.example.org/result.csv"]
    assert records[0].to_dict()["birthDate"] == "2010-05-01"


def test_default_location_comes_from_settings(tmp_path: Path) -> None:
    (tmp_path / "result.csv").write_text("name,className\nSara,G1\n", encoding="utf-8")
    settings = PortalSettings(serving_root=str(tmp_path))

    records = load_dataset(settings=settings)

    assert [record.category for record in records] == ["G1"]


def test_alternative_delimiter_from_settings(tmp_path: Path) -> None:
    (tmp_path / "result.csv").write_text("name;className\nSara;G1\n", encoding="utf-8")
    settings = PortalSettings(serving_root=str(tmp_path), delimiter=";")

    records = load_dataset(settings=settings)

    assert records[0].name == "Sara"


def test_http_failures_are_unreachable_errors() -> None:
    client = _FakeHttpClient(error=requests.HTTPError("404 Client Error: Not Found"))

    with pytest.raises(LoadError) as excinfo:
        fetch_resource("http://localhost:8000/result.csv", http_client=client)

    assert excinfo.value.kind is LoadErrorKind.UNREACHABLE
    assert isinstance(excinfo.value.__cause__, requests.HTTPError)


def test_network_errors_are_unreachable_errors() -> None:
    client = _FakeHttpClient(error=requests.ConnectionError("connection refused"))

    with pytest.raises(LoadError) as excinfo:
        load_dataset("http://localhost:8000/result.csv", http_client=client)

    assert excinfo.value.kind is LoadErrorKind.UNREACHABLE


def test_missing_file_is_an_unreachable_error(tmp_path: Path) -> None:
    with pytest.raises(LoadError) as excinfo:
        load_dataset(str(tmp_path / "missing.csv"))

    assert excinfo.value.kind is LoadErrorKind.UNREACHABLE


@pytest.mark.parametrize(
    "payload",
    [
        b"",
        b"   \n",
        b"PK\x03\x04not really a workbook",
        b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1legacy",
        b"name,className\n\xff\xfe\xfa,G1\n",
        b"name,className\nSara,G1\nOmar,G2,x,y\n",
    ],
)
def test_unparseable_payloads_are_malformed_errors(payload: bytes) -> None:
    with pytest.raises(LoadError) as excinfo:
        parse_table(payload)

    assert excinfo.value.kind is LoadErrorKind.MALFORMED


def test_parse_table_keeps_raw_header_spelling() -> None:
    rows = parse_table("\ufeff name ,Room\nSara,B2\n".encode("utf-8"))

    assert len(rows) == 1
    keys = [key.replace("\ufeff", "") for key in rows[0]]
    assert keys == [" name ", "Room"]


def test_loader_logs_keys_and_sample_for_operators(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="results_portal.ingest.loader"):
        load_dataset(str(FIXTURE_PATH))

    assert "Raw dataset keys" in caplog.text
    assert "Parsed records sample" in caplog.text
    assert f"Loaded 4 records from {FIXTURE_PATH} (fetched " in caplog.text
