"""
Logging Configuration

Configures logging for the proxy.
Output goes to stderr to keep stdout clean for JSON responses.

Fields passed with `extra=` (event, line_number, context, ...) are appended
to each line as key=value pairs so they survive into plain-text logs:

    WARNING  gads_proxy.google_ads.normalizer: Skipping undecodable stream chunk at line 2: ... | event=stream_chunk_skipped line_number=2 error='Expecting value'
"""

import logging
import sys

LOG_FORMAT = "%(levelname)-8s %(name)s: %(message)s"

# Attributes every LogRecord has; anything else came from extra=
_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime"}


def record_extras(record: logging.LogRecord) -> dict:
    """Fields attached to a record through `extra=`, in insertion order."""
    return {
        key: value for key, value in vars(record).items()
        if key not in _RECORD_ATTRIBUTES and not key.startswith("_")
    }


def _format_value(value) -> str:
    # Bare words and numbers unquoted, everything else repr()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, str) and value and not any(c.isspace() for c in value):
        return value
    return repr(value)


class ExtraFieldsFormatter(logging.Formatter):
    """Formatter that appends `extra=` fields as ` | key=value ...`."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = record_extras(record)
        if not extras:
            return line

        fields = " ".join(f"{key}={_format_value(value)}" for key, value in extras.items())
        # Keep any traceback after the fields
        head, sep, tail = line.partition("\n")
        return f"{head} | {fields}{sep}{tail}"


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """
    Configure the gads_proxy logger.

    Args:
        verbose: If True, set level to DEBUG
        quiet: If True, set level to WARNING
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ExtraFieldsFormatter(LOG_FORMAT))

    logger = logging.getLogger("gads_proxy")
    logger.setLevel(level)

    # Avoid duplicate handlers if called multiple times
    logger.handlers.clear()
    logger.addHandler(handler)
