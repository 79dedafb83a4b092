from __future__ import annotations

import hashlib
import logging
import os
import platform
import shutil
import stat
import time
import typing as t
from collections import deque
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from datetime import datetime
from functools import cache
from pathlib import Path
from tempfile import NamedTemporaryFile
from zoneinfo import ZoneInfo

import bs4
import pebble.concurrent
import urllib3

from .exceptions import ConfigurationError
from .version import __version__

log: logging.Logger = logging.getLogger(__name__)
AOC_TZ = ZoneInfo("America/New_York")
USER_AGENT = f"aoc-automaton v{__version__}"
LAST_DAY = 25


class HttpClient:
    # every request to adventofcode.com goes through this wrapper
    # so that we can put in user agent header, rate-limit, etc.

    pool_manager: urllib3.PoolManager
    req_count: dict[t.Literal["GET", "POST"], int]

    def __init__(self) -> None:
        proxy_url = os.environ.get("http_proxy") or os.environ.get("https_proxy")
        if proxy_url:
            self.pool_manager = urllib3.ProxyManager(proxy_url, headers={"User-Agent": USER_AGENT})
        else:
            self.pool_manager = urllib3.PoolManager(headers={"User-Agent": USER_AGENT})
        self.req_count = {"GET": 0, "POST": 0}
        self._max_t = 3.0
        self._cooloff = 0.16
        self._history = deque([time.time() - self._max_t] * 4, maxlen=4)

    def _limiter(self) -> None:
        now = time.time()
        t0 = self._history[0]
        if now - t0 < self._max_t:
            # made 4 requests within 3 seconds - past the speed limit of 1 req/second.
            # the delay starts at 160ms and doubles on each subsequent occasion
            msg = "you're being rate-limited - slow down on the requests! (delay=%.02fs)"
            log.warning(msg, self._cooloff)
            time.sleep(self._cooloff)
            self._cooloff *= 2
            self._cooloff = min(self._cooloff, 10)
        self._history.append(now)

    def get(self, url: str, token: str | None = None) -> urllib3.BaseHTTPResponse:
        # getting user inputs
        if token is None:
            headers = self.pool_manager.headers
        else:
            headers = self.pool_manager.headers | {"Cookie": f"session={token}"}
        self._limiter()
        resp = self.pool_manager.request("GET", url, headers=headers, redirect=False)
        self.req_count["GET"] += 1
        return resp

    def post(
        self, url: str, token: str, fields: t.Mapping[str, str]
    ) -> urllib3.BaseHTTPResponse:
        # submitting answers
        headers = self.pool_manager.headers | {"Cookie": f"session={token}"}
        self._limiter()
        resp = self.pool_manager.request_encode_body(
            method="POST",
            url=url,
            fields=fields,
            headers=headers,
            encode_multipart=False,
        )
        self.req_count["POST"] += 1
        return resp


http: HttpClient = HttpClient()


def _ensure_intermediate_dirs(path: Path) -> None:
    path.expanduser().parent.mkdir(parents=True, exist_ok=True)


def atomic_write_file(path: Path, contents_str: str) -> None:
    """
    Atomically write a string to a file by writing it to a temporary file, and then
    renaming it to the final destination name. This solves a race condition where existence
    of a file doesn't necessarily mean the content is valid yet.
    """
    _ensure_intermediate_dirs(path)
    with NamedTemporaryFile("w", dir=path.parent, encoding="utf-8", delete=False) as f:
        log.debug("writing to tempfile @ %s", f.name)
        f.write(contents_str)
    log.debug("moving %s -> %s", f.name, path)
    shutil.move(f.name, path)


@pebble.concurrent.thread
def _write_in_background(path: Path, contents_str: str, read_only: bool) -> None:
    atomic_write_file(path, contents_str)
    if read_only:
        path.chmod(stat.S_IRUSR | stat.S_IRGRP | stat.S_IROTH)


class PendingWrite:
    """
    Fire-and-forget file writes, with at most one write in flight. Starting a new
    write first waits for the previous one to land. Use `wait` to drain it.

    A failed write never stops the next one: its error is logged and `failed` stays
    set, so the local cache can be reported as possibly incomplete.
    """

    _future: Future | None

    def __init__(self) -> None:
        self._future = None
        self.failed = False

    @property
    def busy(self) -> bool:
        return self._future is not None and not self._future.done()

    def start(self, path: Path, contents_str: str, read_only: bool = False) -> None:
        self.settle()
        log.debug("caching %s in background", path)
        self._future = _write_in_background(path, contents_str, read_only)

    def settle(self) -> None:
        """Wait for the in-flight write, logging its error instead of raising it."""
        try:
            self.wait()
        except OSError as err:
            log.warning("background write failed: %r", err)

    def wait(self, timeout: float | None = None) -> bool:
        """
        Block until the in-flight write, if any, has completed. Returns False if it's
        still running after `timeout` seconds. Errors from the write are re-raised.
        """
        future, self._future = self._future, None
        if future is None:
            return True
        try:
            future.result(timeout=timeout)
        except FutureTimeoutError:
            self._future = future
            return False
        except OSError:
            self.failed = True
            raise
        return True


def answer_file_id(value: str) -> str:
    """
    Identity of an answer for use in a cache filename: the answer itself, if it's short
    and filename-safe, otherwise a stable digest of it.
    """
    if value and len(value) <= 20 and all(c.isalnum() or c in "-_#" for c in value):
        return value
    digest = hashlib.sha256(value.encode("utf-8")).hexdigest()[:16]
    return f"hash-{digest}"


def wait_until(target: datetime, dt: float = 0.1) -> None:
    """
    Block until the wall clock reaches `target` (an aware datetime). Sleeps in small
    increments of `dt` seconds instead of one long sleep.
    """
    while datetime.now(tz=target.tzinfo) < target:
        time.sleep(dt)


def most_recent_year() -> int:
    """
    This year, if it's December.
    The most recent year, otherwise.
    Note: Advent of Code started in 2015
    """
    aoc_now = datetime.now(tz=AOC_TZ)
    year = aoc_now.year
    if aoc_now.month < 12:
        year -= 1
    if year < 2015:
        raise ConfigurationError("Time travel not supported yet")
    return year


def current_day() -> int:
    """
    Most recent day, if it's during the Advent of Code. Happy Holidays!
    Raises ConfigurationError otherwise.
    """
    aoc_now = datetime.now(tz=AOC_TZ)
    if aoc_now.month != 12:
        raise ConfigurationError("current_day is only available in December (EST)")
    return min(aoc_now.day, LAST_DAY)


_ANSIColor = t.Literal[
    "black", "red", "green", "yellow", "blue", "magenta", "cyan", "white"
]
_ansi_colors = t.get_args(_ANSIColor)
if platform.system() == "Windows":
    os.system("color")  # hack - makes ANSI colors work in the windows cmd window


def colored(txt: str, color: _ANSIColor | None) -> str:
    if color is None:
        return txt
    code = _ansi_colors.index(color.casefold())
    reset = "\x1b[0m"
    return f"\x1b[{code + 30}m{txt}{reset}"


@cache
def _get_soup(html):
    return bs4.BeautifulSoup(html, "html.parser")
