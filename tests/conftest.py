"""Shared fixtures and helpers for tests."""
from __future__ import annotations

import pytest

from fortunedb import FortuneDB


# ---------------------------------------------------------------------------
# Sample corpora
# ---------------------------------------------------------------------------

# Six fortunes; the fifth one is empty (two consecutive delimiters).
#   0 "short"                      length 5,  width 5,  height 1
#   1 "two\nlines"                 length 9,  width 5,  height 2
#   2 "a much longer single line"  length 25, width 25, height 1
#   3 "three\nline\nfortune"       length 18, width 7,  height 3
#   4 ""                           length 0,  width 0,  height 1
#   5 "end"                        length 3,  width 3,  height 1
FORTUNES = (
    "short\n%%\n"
    "two\nlines\n%%\n"
    "a much longer single line\n%%\n"
    "three\nline\nfortune\n%%\n"
    "%%\n"
    "end\n"
)


@pytest.fixture
def fortunes_text():
    return FORTUNES


@pytest.fixture
def store():
    return FortuneDB.from_text(FORTUNES, seed=42)


@pytest.fixture
def named_sources():
    return {
        "art": "Art is long.\n%%\nLife is short.\n",
        "zippy": "Are we having fun yet?\n%%\nYow!\n%%\nI want a burger.\n",
        "computers/unix": "There is no place like ~\n",
    }
