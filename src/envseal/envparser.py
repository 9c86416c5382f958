"""
.env parser -- raw text in, ordered key/value mapping out.

A two-state machine. It never raises: lines it cannot make sense of
are skipped and logged, so a half-broken file still yields every
secret it can.

Transitions (every line is whitespace-trimmed first):

    state        line                                 -> action / next state
    -----------  -----------------------------------  ---------------------------------
    SCANNING     blank or starts with '#'             -> skip / SCANNING
    SCANNING     KEY="... (no unescaped closing ")    -> open buffer without the quote
                                                         / ACCUMULATING
    SCANNING     KEY=VALUE                            -> strip one outer quote pair,
                                                         commit / SCANNING
    SCANNING     anything else                        -> skip / SCANNING
    ACCUMULATING ends with unescaped "                -> append minus the quote,
                                                         commit / SCANNING
    ACCUMULATING anything else (blank lines included) -> append / ACCUMULATING
    ACCUMULATING end of input                         -> commit buffer as-is

Single-line quote stripping accepts either quote character on each end
independently, so ``"value'`` is stripped just like ``"value"``.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Optional

logger = logging.getLogger("envseal.envparser")

KEY_VALUE_RE = re.compile(r"^([A-Za-z0-9_]+)=(.*)$")
QUOTED_VALUE_RE = re.compile(r"^[\"'](.*)[\"']$", re.DOTALL)


class ParserState(str, Enum):
    """Where the parser is within the current entry."""

    SCANNING_KEY = "scanning_key"
    ACCUMULATING = "accumulating_multiline_value"


def _ends_with_closing_quote(text: str) -> bool:
    """True if text ends in a double quote that is not backslash-escaped."""
    return text.endswith('"') and not text.endswith('\\"')


def _strip_outer_quotes(value: str) -> str:
    match = QUOTED_VALUE_RE.match(value)
    return match.group(1) if match else value


class EnvParser:
    """Incremental .env parser.

    Feed it lines with :meth:`feed`, then call :meth:`finish` to flush a
    multi-line value that never saw its closing quote.
    """

    def __init__(self) -> None:
        self.state = ParserState.SCANNING_KEY
        self.secrets: dict[str, str] = {}
        self._key: Optional[str] = None
        self._buffer = ""
        self._lineno = 0

    def feed(self, raw_line: str) -> None:
        self._lineno += 1
        line = raw_line.strip()
        if self.state is ParserState.ACCUMULATING:
            self._accumulate(line)
        else:
            self._scan(line)

    def finish(self) -> dict[str, str]:
        """Close out parsing and return the collected secrets."""
        if self.state is ParserState.ACCUMULATING and self._key:
            logger.debug(
                "Unterminated multi-line value for %s, keeping %d chars",
                self._key,
                len(self._buffer),
            )
            self._commit(self._key, self._buffer)
        self.state = ParserState.SCANNING_KEY
        logger.debug("Parsed %d secret(s)", len(self.secrets))
        return self.secrets

    def _scan(self, line: str) -> None:
        if not line or line.startswith("#"):
            return

        match = KEY_VALUE_RE.match(line)
        if not match:
            logger.debug("Line %d is not KEY=VALUE, skipping", self._lineno)
            return

        key, value = match.group(1), match.group(2)
        # The opening quote cannot double as the closing one.
        if value.startswith('"') and not _ends_with_closing_quote(value[1:]):
            self._key = key
            self._buffer = value[1:]
            self.state = ParserState.ACCUMULATING
            return

        self._commit(key, _strip_outer_quotes(value))

    def _accumulate(self, line: str) -> None:
        if _ends_with_closing_quote(line):
            self._buffer = f"{self._buffer}\n{line[:-1]}"
            self._commit(self._key, self._buffer)
            self.state = ParserState.SCANNING_KEY
            return
        self._buffer = f"{self._buffer}\n{line}"

    def _commit(self, key: str, value: str) -> None:
        if key in self.secrets:
            logger.debug("Duplicate key %s, later value wins", key)
        self.secrets[key] = value
        logger.debug("Added secret %s (%d chars)", key, len(value))
        self._key = None
        self._buffer = ""


def parse_env(text: str) -> dict[str, str]:
    """Parse .env text into an ordered key/value mapping.

    Args:
        text: Raw file contents.

    Returns:
        Dict of key -> value in order of first appearance.
    """
    parser = EnvParser()
    for line in text.split("\n"):
        parser.feed(line)
    return parser.finish()
