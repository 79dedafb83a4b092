import logging
import os
import sys
from pathlib import Path
from textwrap import dedent

import urllib3

from .exceptions import ConfigurationError
from .exceptions import DeadTokenError
from .exceptions import PuzzleLockedError
from .exceptions import TransportError
from .utils import answer_file_id
from .utils import atomic_write_file
from .utils import colored
from .utils import http


log = logging.getLogger(__name__)


AOCAUTO_DATA_DIR = Path(os.environ.get("AOCAUTO_DIR", Path("~", ".config", "aocauto")))
AOCAUTO_DATA_DIR = AOCAUTO_DATA_DIR.expanduser()
AOCAUTO_CONFIG_DIR = Path(os.environ.get("AOCAUTO_CONFIG_DIR", AOCAUTO_DATA_DIR)).expanduser()
URL = "https://adventofcode.com/{year}/day/{day}"


class User:
    def __init__(self, token):
        self.token = token

    def __str__(self):
        return f"<{type(self).__name__} (token=...{self.token[-4:]})>"


def default_user():
    """
    Discover user's token from the environment or file, and exit with a diagnostic
    message if none can be found.
    """
    # export your session id as AOC_SESSION env var
    cookie = os.getenv("AOC_SESSION")
    if cookie:
        return User(token=cookie)

    # or chuck it in a plaintext file at ~/.config/aocauto/token
    try:
        cookie = (AOCAUTO_CONFIG_DIR / "token").read_text(encoding="utf-8").split()[0]
    except (FileNotFoundError, IndexError):
        pass
    if cookie:
        return User(token=cookie)

    msg = dedent(
        f"""\
        ERROR: AoC session ID is needed to get your puzzle data!
        You can find it in your browser cookies after login.
            1) Save the cookie into a text file {AOCAUTO_CONFIG_DIR / "token"}, or
            2) Export the cookie in environment variable AOC_SESSION
        """
    )
    print(colored(msg, color="red"), file=sys.stderr)
    raise ConfigurationError("Missing session ID")


def save_token(token):
    path = AOCAUTO_CONFIG_DIR / "token"
    log.info("saving session token ...%s to %s", token[-4:], path)
    atomic_write_file(path, token)


class PuzzleSite:
    """
    The adventofcode.com endpoints of one puzzle day, for one user: personal input
    download and answer submission. Also knows where those are cached on disk.
    """

    remote = True

    def __init__(self, year, day, user=None, data_dir=None):
        self.year = year
        self.day = day
        if user is None:
            user = default_user()
        self.user = user
        if data_dir is None:
            data_dir = AOCAUTO_DATA_DIR
        self.data_dir = Path(data_dir)
        self.input_data_url = self.url + "/input"
        self.submit_url = self.url + "/answer"
        self._prefix = f"{self.year}_{self.day:02d}"
        self.input_data_path = self.data_dir / f"{self._prefix}_input.txt"

    @property
    def url(self):
        """A link to the puzzle's description page on adventofcode.com."""
        return URL.format(year=self.year, day=self.day)

    def response_path(self, part, value):
        """Where the server's reply to posting `value` for `part` is cached."""
        return self.data_dir / f"{self._prefix}_answer{part}_{answer_file_id(value)}.html"

    def set_token(self, token):
        self.user = User(token=token)
        save_token(token)

    def fetch_input(self):
        """
        This puzzle's input data, specific to self.user. Comes from the cache when it
        was downloaded before, otherwise it's requested from the server. Caching the
        download is left to the caller.
        """
        try:
            data = self.input_data_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            log.debug("input_data cache miss %s", self.input_data_path)
        else:
            log.debug("input_data cache hit %s", self.input_data_path)
            return data
        sanitized = "..." + self.user.token[-4:]
        log.info("getting data year=%s day=%s token=%s", self.year, self.day, sanitized)
        try:
            response = http.get(self.input_data_url, token=self.user.token)
        except urllib3.exceptions.HTTPError as err:
            raise TransportError(f"failed to reach {self.input_data_url}: {err}") from err
        if response.status == 404:
            raise PuzzleLockedError(f"{self.year}/{self.day:02d} not available yet")
        if response.status != 200:
            log.error("got %s status code token=%s", response.status, sanitized)
            log.error(response.data.decode(errors="replace"))
            msg = f"HTTP {response.status} at {self.input_data_url}"
            if response.status in {302, 400, 500}:
                raise DeadTokenError(msg, response.status)
            raise TransportError(msg, response.status)
        return response.data.decode()

    def submit_answer(self, part, value):
        """POST an answer, returning the raw text of the server's reply."""
        sanitized = "..." + self.user.token[-4:]
        url = self.submit_url
        log.info("posting %r to %s (part %s) token=%s", value, url, part, sanitized)
        fields = {"level": str(part), "answer": value}
        try:
            response = http.post(url, token=self.user.token, fields=fields)
        except urllib3.exceptions.HTTPError as err:
            raise TransportError(f"failed to reach {url}: {err}") from err
        if response.status != 200:
            log.error("got %s status code", response.status)
            log.error(response.data.decode(errors="replace"))
            raise TransportError(f"HTTP {response.status} at {url}", response.status)
        return response.data.decode()


class ManualSite:
    """
    Offline stand-in for adventofcode.com: the operator types the puzzle input by hand
    and confirms each answer. Nothing is cached, the replies are synthesized.
    """

    remote = False
    input_data_path = None
    good_reply = "<article><p>That's the right answer!</p></article>"
    wrong_reply = "<article><p>That's not the right answer.</p></article>"

    def __init__(self, year, day, interact):
        self.year = year
        self.day = day
        self.interact = interact

    def response_path(self, part, value):
        return None

    def set_token(self, token):
        log.debug("manual site has no use for a session token")

    def fetch_input(self):
        prompt = "Please provide input for the exercise (insert two empty lines to close input):"
        return self.interact.ask_multiline(prompt)

    def submit_answer(self, part, value):
        self.interact.trace(f"Answer for part {part} is:")
        self.interact.trace(value)
        if self.interact.ask_yes_no("Is this answer valid? (y/n)"):
            return self.good_reply
        return self.wrong_reply
