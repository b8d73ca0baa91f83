"""
Response Normalizer

Decodes Google Ads search responses into a flat list of result rows.

Two encodings are accepted:
- single JSON document (googleAds:search): an object with a `results`
  array, an array of rows/batches, or a bare resource object
- chunk stream (googleAds:searchStream, line-delimited or concatenated
  JSON values): each chunk decoded the same way; undecodable chunks are
  skipped and logged

Both produce the same rows, in provider order.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, List, Optional, Tuple

from .errors import InvalidArgument, MalformedResponse

logger = logging.getLogger(__name__)

# camelCase spelling -> canonical snake_case key
RESOURCE_KEY_ALIASES = {
    "adGroup": "ad_group",
    "adGroupAd": "ad_group_ad",
    "customerClient": "customer_client",
}

# A chunk carrying any of these is a result row
RESULT_ROW_KEYS = ("campaign", "ad_group", "ad_group_ad", "customer_client", "metrics")

_BODY_EXCERPT_CHARS = 500
_NON_DIGITS = re.compile(r"\D")
_decoder = json.JSONDecoder()


def normalize_customer_id(customer_id: Any, name: str = "customer_id") -> str:
    """
    Strip separators from a Google Ads customer ID.

    "123-456-7890" and "1234567890" both become "1234567890".

    Raises:
        InvalidArgument: If the value is not a string/int or has no digits
    """
    if isinstance(customer_id, int) and not isinstance(customer_id, bool):
        customer_id = str(customer_id)
    if not isinstance(customer_id, str) or not customer_id:
        raise InvalidArgument(f"Invalid {name}: {customer_id!r}")

    digits = _NON_DIGITS.sub("", customer_id)
    if not digits:
        raise InvalidArgument(f"Invalid {name}: {customer_id!r}")
    return digits


def _camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def get_field(mapping: Any, path: str, default: Any = None) -> Any:
    """
    Read a dotted GAQL-style field path from a result row.

    Each segment is looked up under its snake_case spelling first, then
    camelCase, since REST rows use camelCase below the resource level.

        get_field(row, "customer_client.descriptive_name")
    """
    current = mapping
    for segment in path.split("."):
        if not isinstance(current, dict):
            return default
        if segment in current:
            current = current[segment]
        else:
            current = current.get(_camel_case(segment))
        if current is None:
            return default
    return current


def _reconcile_keys(chunk: dict) -> dict:
    """Copy alternate resource spellings into canonical keys (only when absent)."""
    missing = {
        canonical: chunk[alias]
        for alias, canonical in RESOURCE_KEY_ALIASES.items()
        if alias in chunk and not chunk.get(canonical)
    }
    if not missing:
        return chunk
    reconciled = dict(chunk)
    reconciled.update(missing)
    return reconciled


def normalize_chunk(chunk: Any) -> List[dict]:
    """
    Turn one decoded chunk into zero, one, or many result rows.

    - {"results": [...]}: every row, resource keys reconciled; rows with
      other resources (asset_group, ...) are kept
    - bare resource object (campaign, ad group, customer client, metrics): [chunk]
    - anything else (stream metadata such as fieldMask/requestId): []
    """
    if not isinstance(chunk, dict):
        return []

    results = chunk.get("results")
    if isinstance(results, list):
        return [_reconcile_keys(row) for row in results if isinstance(row, dict)]

    chunk = _reconcile_keys(chunk)
    if any(chunk.get(key) for key in RESULT_ROW_KEYS):
        return [chunk]

    logger.debug("Chunk without result rows skipped; keys: %s", sorted(chunk))
    return []


def decode_search_body(document: Any) -> List[dict]:
    """Flatten a parsed single-document response into rows."""
    if isinstance(document, list):
        rows: List[dict] = []
        for item in document:
            rows.extend(normalize_chunk(item))
        return rows
    return normalize_chunk(document)


def _decode_line(line: str) -> List[Any]:
    """
    Decode every JSON value on one stream line.

    Raises:
        ValueError: If any part of the line is not JSON, or a value is
            not an object/array
    """
    values = []
    pos = 0
    end = len(line)
    while True:
        while pos < end and line[pos] in " \t\r\n,":
            pos += 1
        if pos >= end:
            return values
        value, pos = _decoder.raw_decode(line, pos)
        if not isinstance(value, (dict, list)):
            raise ValueError(f"Stream chunk is a bare {type(value).__name__}, not an object or array")
        values.append(value)


def decode_stream_body(text: str) -> Tuple[List[dict], int]:
    """
    Decode a chunked stream body.

    A line counts only when all of it decodes; a line that fails part way
    contributes no rows.

    Returns:
        (rows, skipped) where skipped counts lines that failed to decode

    Raises:
        MalformedResponse: If not a single line in the body decodes
    """
    rows: List[dict] = []
    decoded = 0
    skipped = 0

    for line_number, line in enumerate(text.splitlines(), 1):
        if not line.strip():
            continue
        try:
            values = _decode_line(line)
        except ValueError as e:
            error = e.msg if isinstance(e, json.JSONDecodeError) else str(e)
            skipped += 1
            logger.warning(
                "Skipping undecodable stream chunk at line %d: %s",
                line_number, error,
                extra={
                    "event": "stream_chunk_skipped",
                    "line_number": line_number,
                    "error": error,
                },
            )
            continue

        decoded += 1
        for value in values:
            rows.extend(decode_search_body(value))

    if not decoded:
        raise MalformedResponse(
            "Response body is neither a JSON document nor a JSON chunk stream",
            text[:_BODY_EXCERPT_CHARS],
        )
    return rows, skipped


def decode_response(text: Optional[str]) -> List[dict]:
    """
    Decode a search or searchStream response body into result rows.

    Raises:
        MalformedResponse: If the body is blank, a bare JSON scalar, or
            matches neither encoding
    """
    if text is None or not text.strip():
        raise MalformedResponse("Empty response body from Google Ads API")

    try:
        document = json.loads(text)
    except json.JSONDecodeError:
        rows, skipped = decode_stream_body(text)
        logger.debug("Decoded stream body: %d rows, %d chunks skipped", len(rows), skipped)
        return rows

    if not isinstance(document, (dict, list)):
        raise MalformedResponse(
            f"Response body is a JSON {type(document).__name__}, not an object or array",
            text[:_BODY_EXCERPT_CHARS],
        )
    return decode_search_body(document)
