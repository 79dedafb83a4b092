import pook as pook_mod
import pytest

from aocauto.utils import http


@pytest.fixture(autouse=True)
def mocked_sleep(mocker):
    no_sleep_till_brooklyn = mocker.patch("time.sleep")
    # nerf the rate-limiter - tests don't actually talk to AoC server at all
    # (and they *can't*, because we disable socket during tests)
    http._max_t = -1.0
    return no_sleep_till_brooklyn


@pytest.fixture
def aocauto_data_dir(tmp_path):
    data_dir = tmp_path / ".config" / "aocauto-data"
    data_dir.mkdir(parents=True)
    return data_dir


@pytest.fixture
def aocauto_config_dir(tmp_path):
    token_dir = tmp_path / ".config" / "aocauto-config"
    token_dir.mkdir(parents=True)
    return token_dir


@pytest.fixture(autouse=True)
def remove_user_env(aocauto_data_dir, monkeypatch, aocauto_config_dir):
    monkeypatch.setattr("aocauto.runner.AOCAUTO_DATA_DIR", aocauto_data_dir)
    monkeypatch.setattr("aocauto.models.AOCAUTO_DATA_DIR", aocauto_data_dir)
    monkeypatch.setattr("aocauto.models.AOCAUTO_CONFIG_DIR", aocauto_config_dir)
    monkeypatch.delenv("AOC_SESSION", raising=False)


@pytest.fixture(autouse=True)
def test_token(aocauto_config_dir):
    token_file = aocauto_config_dir / "token"
    token_file.write_text("thetesttoken")
    return token_file


@pytest.fixture
def pook():
    pook_mod.on()
    yield pook_mod
    pook_mod.off()


class FakeConsole:
    """Scripted operator: records everything traced, answers questions from a queue."""

    def __init__(self, replies=()):
        self.replies = list(replies)
        self.lines = []
        self.errors = []
        self.prompts = []

    def trace(self, message, color=None):
        self.lines.append(str(message))

    def report_error(self, message):
        self.errors.append(str(message))

    def ask_input(self, prompt=None):
        self.prompts.append(prompt)
        if not self.replies:
            raise AssertionError(f"unexpected question: {prompt!r}")
        return self.replies.pop(0)

    def ask_yes_no(self, prompt=None):
        return self.ask_input(prompt).strip()[:1] in {"y", "Y"}

    def ask_multiline(self, prompt=None):
        return self.ask_input(prompt)

    @property
    def output(self):
        return "\n".join(self.lines)


@pytest.fixture
def console():
    return FakeConsole()
