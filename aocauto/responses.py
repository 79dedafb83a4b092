"""
Classification of the prose that adventofcode.com replies with when an answer is
posted. The interesting part of the reply lives inside the page's <article> element.
"""
from __future__ import annotations

import enum
import logging
import re
from datetime import timedelta
from textwrap import dedent
from typing import NamedTuple
from typing import Optional

from .utils import _get_soup


log = logging.getLogger(__name__)

ARTICLE_START = "<article>"
ARTICLE_END = "</article>"

GOOD_ANSWER = re.compile(r"That's the right answer!")
TOO_HIGH = re.compile(r"your answer is too high")
TOO_LOW = re.compile(r"your answer is too low")
ALREADY_ANSWERED = re.compile(r"You don't seem to be solving the right level\.")
TOO_SOON = re.compile(r"You have (?:(\d+)m)? ?(?:(\d+)s)? left to wait\.")

SETUP_DOCUMENTATION = dedent(
    """\
    Export an environment variable named AOC_SESSION whose value is your Advent of Code
    session id, or save it in the token file of the aocauto config directory.
    The session id is stored in a cookie named 'session', valid for '.adventofcode.com'.
    To get a valid value, you must log in to the AoC site first.
    """
)


class Outcome(enum.Enum):
    GOOD = "good"
    TOO_HIGH = "too high"
    TOO_LOW = "too low"
    ALREADY_ANSWERED = "already answered"
    NEEDS_WAIT = "needs wait"
    TECHNICAL_ERROR = "technical error"
    WRONG = "wrong"


class Verdict(NamedTuple):
    """
    Result of classifying a submission reply. For a technical error, `message` is the
    raw reply verbatim. `wait` is only set for NEEDS_WAIT.
    """

    outcome: Outcome
    message: str
    wait: Optional[timedelta] = None

    @property
    def ok(self) -> bool:
        return self.outcome in {Outcome.GOOD, Outcome.ALREADY_ANSWERED}

    @property
    def technical(self) -> bool:
        return self.outcome is Outcome.TECHNICAL_ERROR


def extract_message(raw: str) -> str | None:
    """Plain text of the first <article> of the reply, or None if it can't be found."""
    start = raw.find(ARTICLE_START)
    if start == -1:
        return None
    start += len(ARTICLE_START)
    end = raw.find(ARTICLE_END, start)
    if end == -1:
        return None
    return _get_soup(raw[start:end]).get_text()


def _is_integer(value: str) -> bool:
    try:
        int(value)
    except ValueError:
        return False
    return True


def parse_wait(message: str) -> timedelta | None:
    match = TOO_SOON.search(message)
    if match is None:
        return None
    minutes, seconds = match.groups()
    if minutes is None and seconds is None:
        return None
    return timedelta(minutes=int(minutes or 0), seconds=int(seconds or 0))


def classify(raw: str, submitted: str) -> Verdict:
    """
    Map the raw reply to a submission of `submitted` onto a Verdict. Never raises:
    a reply without the expected <article> markers is a TECHNICAL_ERROR verdict.
    Anything well-formed but unrecognised is WRONG.
    """
    message = extract_message(raw)
    if message is None:
        log.warning("failed to parse response")
        return Verdict(Outcome.TECHNICAL_ERROR, raw)
    if ALREADY_ANSWERED.search(message):
        return Verdict(Outcome.ALREADY_ANSWERED, message)
    numeric = _is_integer(submitted)
    if numeric and TOO_HIGH.search(message):
        return Verdict(Outcome.TOO_HIGH, message)
    if numeric and TOO_LOW.search(message):
        return Verdict(Outcome.TOO_LOW, message)
    wait = parse_wait(message)
    if wait is not None:
        return Verdict(Outcome.NEEDS_WAIT, message, wait)
    if GOOD_ANSWER.search(message):
        return Verdict(Outcome.GOOD, message)
    log.warning("unrecognised submit message %r", message)
    return Verdict(Outcome.WRONG, message)


def diagnose(raw: str) -> str | None:
    """
    Guidance for the operator when a technical error looks like an authentication
    problem (these are worth retrying with a fresh session token). None otherwise.
    """
    if "HTTP 500" in raw or "500 Internal Server Error" in raw:
        return (
            "AoC: Internal Server Error. This is likely an indication of a corrupted "
            "AoC session token."
        )
    if (
        "HTTP 400" in raw
        or "400 Bad Request" in raw
        or "To play, please identify yourself via one of these services:" in raw
    ):
        return (
            "AoC: Bad Request. This is likely due to an expired AoC session token. "
            "You need to get a fresh session token."
        )
    if "HTTP 404" in raw or "404 Not Found" in raw:
        return (
            "AoC: Not Found. This is likely due to an expired AoC session token. "
            "You need to get a fresh session token."
        )
    return None
