import json
import logging
import re

from core.exceptions import ParseError

logger = logging.getLogger(__name__)

Scalar = int | float | str | bool | None
Record = dict[str, Scalar]

INTEGER_PATTERN = re.compile(r"[+-]?\d+")
NUMBER_PATTERN = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")

CSV_HINTS = ("text/csv", "csv")
JSON_HINTS = ("application/json", "json")


def detect_format(format_hint: str) -> str:
    """Map a file name, MIME type or bare format name to "csv" or "json"."""
    hint = format_hint.strip().lower()
    if hint in CSV_HINTS or hint.endswith(".csv"):
        return "csv"
    if hint in JSON_HINTS or hint.endswith(".json"):
        return "json"
    raise ParseError("Unsupported file type. Please upload a CSV or JSON file.")


def parse_scalar(value: str) -> int | float | str:
    if INTEGER_PATTERN.fullmatch(value):
        return int(value)
    if NUMBER_PATTERN.fullmatch(value):
        return float(value)
    return value


def parse_csv(text: str) -> list[Record]:
    # No support for quoted fields, a comma always separates columns
    lines = text.strip().replace("\r\n", "\n").split("\n")
    if len(lines) < 2:
        return []

    headers = [header.strip() for header in lines[0].split(",")]
    records: list[Record] = []
    for line in lines[1:]:
        values = line.split(",")
        record: Record = {}
        for i, header in enumerate(headers):
            value = values[i].strip() if i < len(values) else ""
            record[header] = parse_scalar(value) if value != "" else value
        records.append(record)
    return records


def parse_json(text: str) -> list[Record]:
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, RecursionError) as e:
        logger.warning("Failed to parse JSON: %s", e)
        return []

    if isinstance(data, list) and all(isinstance(item, dict) for item in data):
        return data

    logger.warning("JSON input is not an array of objects, ignoring it")
    return []


def decode_contents(contents: str | bytes) -> str:
    if isinstance(contents, str):
        return contents
    try:
        return contents.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ParseError(f"Failed to parse file: {e}") from e


def parse_file(contents: str | bytes, format_hint: str) -> list[Record]:
    """Parse the raw contents of an uploaded file into records.

    ``format_hint`` may be a file name, a MIME type or a bare format name.
    An unsupported format or an empty file raises ``ParseError``. Malformed
    JSON is not an error and yields no records.
    """
    file_format = detect_format(format_hint)
    text = decode_contents(contents)
    if text.strip() == "":
        raise ParseError("File is empty.")

    if file_format == "csv":
        return parse_csv(text)
    return parse_json(text)
