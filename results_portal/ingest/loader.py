from __future__ import annotations

import io
import logging
import zipfile
from pathlib import Path
from typing import Any
from xml.etree import ElementTree

import pandas as pd
import requests
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from results_portal.ingest.base import RawResponse
from results_portal.ingest.errors import LoadError, LoadErrorKind
from results_portal.ingest.http import PoliteHttpClient
from results_portal.normalize.columns import normalize_row
from results_portal.normalize.schema import StudentRecord
from results_portal.settings import PortalSettings, is_url

logger = logging.getLogger(__name__)

_XLSX_SIGNATURE = b"PK\x03\x04"
_OLE_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"
_SAMPLE_SIZE = 2


def fetch_resource(
    location: str,
    *,
    http_client: Any | None = None,
    settings: PortalSettings | None = None,
) -> RawResponse:
    """Read the raw dataset bytes from a URL or a local path."""
    if is_url(location):
        client = http_client or PoliteHttpClient.from_settings(settings or PortalSettings.baseline())
        try:
            content = client.get_bytes(location)
        except requests.RequestException as exc:
            raise LoadError(
                f"Failed to fetch dataset from {location}: {exc}",
                kind=LoadErrorKind.UNREACHABLE,
            ) from exc
        finally:
            if http_client is None:
                client.close()
    else:
        try:
            content = Path(location).read_bytes()
        except OSError as exc:
            raise LoadError(
                f"Failed to read dataset at {location}: {exc}",
                kind=LoadErrorKind.UNREACHABLE,
            ) from exc

    return RawResponse(content=content, location=location, fetched_at=RawResponse.utcnow())


def _header_labels(header: tuple[Any, ...]) -> list[str]:
    """Blank headers get pandas-style `Unnamed: N` labels, repeats get a `.N` suffix."""
    labels: list[str] = []
    seen: dict[str, int] = {}
    for index, cell in enumerate(header):
        label = f"Unnamed: {index}" if cell is None else str(cell)
        if label in seen:
            seen[label] += 1
            label = f"{label}.{seen[label]}"
        else:
            seen[label] = 0
        labels.append(label)
    return labels


def _read_workbook(payload: bytes) -> list[dict[str, Any]]:
    try:
        workbook = load_workbook(io.BytesIO(payload), read_only=True, data_only=True)
        try:
            row_iter = workbook.worksheets[0].iter_rows(values_only=True)
            header = next(row_iter, None)
            if header is None:
                return []
            labels = _header_labels(header)

            rows: list[dict[str, Any]] = []
            for values in row_iter:
                # Cells keep the type the sheet stores; empty cells are absent.
                row = {label: value for label, value in zip(labels, values) if value is not None}
                if row:
                    rows.append(row)
            return rows
        finally:
            workbook.close()
    except (
        ElementTree.ParseError,
        IndexError,
        InvalidFileException,
        KeyError,
        ValueError,
        zipfile.BadZipFile,
    ) as exc:
        raise LoadError(
            f"Dataset workbook could not be read: {exc}",
            kind=LoadErrorKind.MALFORMED,
        ) from exc


def _read_delimited(payload: bytes, delimiter: str) -> pd.DataFrame:
    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise LoadError(
            f"Dataset is not valid UTF-8 text: {exc}",
            kind=LoadErrorKind.MALFORMED,
        ) from exc

    try:
        # Everything stays text so phone numbers keep their leading zeros.
        return pd.read_csv(io.StringIO(text), sep=delimiter, dtype=str, keep_default_na=False)
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as exc:
        raise LoadError(
            f"Dataset could not be parsed as delimited text: {exc}",
            kind=LoadErrorKind.MALFORMED,
        ) from exc


def parse_table(payload: bytes, *, delimiter: str = ",") -> list[dict[str, Any]]:
    """Parse the first sheet or table of `payload` into header-keyed rows."""
    if not payload.strip():
        raise LoadError("Dataset payload is empty.", kind=LoadErrorKind.MALFORMED)
    if payload.startswith(_OLE_SIGNATURE):
        raise LoadError(
            "Legacy .xls workbooks are not supported; save the sheet as .xlsx or CSV.",
            kind=LoadErrorKind.MALFORMED,
        )

    if payload.startswith(_XLSX_SIGNATURE):
        return _read_workbook(payload)
    return _read_delimited(payload, delimiter).to_dict(orient="records")


def load_dataset(
    location: str | None = None,
    *,
    http_client: Any | None = None,
    settings: PortalSettings | None = None,
) -> list[StudentRecord]:
    resolved_settings = settings or PortalSettings.baseline()
    resolved_location = location or resolved_settings.resource_location

    raw_response = fetch_resource(
        resolved_location,
        http_client=http_client,
        settings=resolved_settings,
    )
    rows = parse_table(raw_response.content, delimiter=resolved_settings.delimiter)
    if rows:
        logger.debug("Raw dataset keys: %s", list(rows[0].keys()))

    records = [StudentRecord.from_mapping(normalize_row(row)) for row in rows]
    logger.debug("Parsed records sample: %s", [record.to_dict() for record in records[:_SAMPLE_SIZE]])
    logger.info(
        "Loaded %d records from %s (fetched %s)",
        len(records),
        raw_response.location,
        raw_response.fetched_at.strftime("%Y-%m-%dT%H:%M:%SZ"),
    )
    return records
