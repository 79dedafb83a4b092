import logging
from datetime import datetime

from .answers import Answer
from .exceptions import TransportError
from .responses import classify
from .responses import diagnose
from .responses import Outcome
from .responses import SETUP_DOCUMENTATION
from .responses import Verdict
from .utils import AOC_TZ
from .utils import wait_until


log = logging.getLogger(__name__)


class AnswerSubmitter:
    """
    Submits answers for one puzzle day. Answers which are certain to be incorrect,
    given the bounds learned from earlier "too high" / "too low" replies, are rejected
    locally. Replies are cached on disk so that the same answer is never posted
    twice, and "you gave an answer too recently" replies are waited out.
    """

    def __init__(self, site, store, interact, writer):
        self.site = site
        self.store = store
        self.interact = interact
        self.writer = writer

    def submit(self, part, answer):
        """True when the answer was accepted, or the part had already been answered."""
        answer = Answer.of(answer)
        if answer is None:
            self.interact.trace(f"No answer provided! Please override part{part}() with your code.")
            return False
        if answer.number is not None and answer.number <= 0:
            if answer.number == 0:
                self.interact.trace("Answer cannot be zero.")
            else:
                self.interact.trace(f"Answer cannot be negative, not submitted: {answer.number}")
            return False
        text = answer.text
        self.store.record_attempt(part, text)
        if answer.number is not None and not self.in_bounds(part, answer.number):
            success = False
        else:
            verdict = self.post(part, text)
            if answer.number is not None:
                self.store.update_bounds(part, answer.number, verdict.outcome)
            success = verdict.ok
        if success:
            self.store.mark_solved(part, text)
        self.interact.trace(f"Part {part} {'passed' if success else 'failed'}!", "green" if success else "red")
        return success

    def in_bounds(self, part, number):
        state = self.store.progress.part(part)
        if state.low is not None and number <= state.low:
            if number == state.low:
                msg = f"Answer not submitted. '{number}' was attempted and reported as too low."
            else:
                msg = (
                    f"Answer not submitted. Previous attempt '{state.low}' was reported "
                    f"as too low and {number} is also too low."
                )
            self.interact.trace(msg, "red")
            return False
        if state.high is not None and number >= state.high:
            if number == state.high:
                msg = f"Answer not submitted. '{number}' was attempted and reported as too high."
            else:
                msg = (
                    f"Answer not submitted. Previous attempt '{state.high}' was reported "
                    f"as too high and {number} is also too high."
                )
            self.interact.trace(msg, "red")
            return False
        return True

    def post(self, part, value):
        """
        Get the server's verdict on `value`, from the cached reply if there is one.
        Waits and resubmits for as long as the server says it's too soon.
        """
        self.interact.trace(f"Day {self.site.day}-{part}: {value} [{self.site.year}].")
        path = self.site.response_path(part, value)
        while True:
            fresh = True
            try:
                raw, when, fresh = self._post_or_replay(part, value, path)
            except TransportError as err:
                raw, when = str(err), None
            verdict = classify(raw, value)
            if verdict.technical:
                if self._retry_with_new_token(raw):
                    continue
                self.interact.report_error("Failed to parse response, giving up on this answer.")
                return verdict
            self.interact.trace(f"AoC site response: {verdict.message!r}", _color(verdict))
            if fresh and path is not None:
                self.writer.start(path, raw)
            if verdict.outcome is Outcome.ALREADY_ANSWERED:
                self.interact.trace("Question was already answered.")
            elif verdict.outcome is Outcome.TOO_HIGH:
                self.interact.trace(f"{value} is too high.")
            elif verdict.outcome is Outcome.TOO_LOW:
                self.interact.trace(f"{value} is too low.")
            elif verdict.outcome is Outcome.NEEDS_WAIT:
                target = (when or datetime.now(tz=AOC_TZ)) + verdict.wait
                self.interact.trace(f"Waiting until {target:%H:%M:%S} to push answer.")
                log.info("waiting %d seconds to autoretry", verdict.wait.total_seconds())
                wait_until(target)
                if path is not None:
                    # the stale reply must not be replayed on the next round
                    self.writer.settle()
                    path.unlink(missing_ok=True)
                continue
            return verdict

    def _post_or_replay(self, part, value, path):
        if path is not None and path.is_file():
            self.interact.trace(f"Answer {value} has already been attempted.")
            log.debug("replaying cached response %s", path)
            when = datetime.fromtimestamp(path.stat().st_mtime, tz=AOC_TZ)
            return path.read_text(encoding="utf-8"), when, False
        raw = self.site.submit_answer(part, value)
        return raw, datetime.now(tz=AOC_TZ), True

    def _retry_with_new_token(self, raw):
        guidance = diagnose(raw)
        if guidance is None:
            self.interact.report_error(raw)
            return False
        self.interact.report_error(guidance)
        self.interact.trace(SETUP_DOCUMENTATION)
        token = self.interact.ask_input("Please provide the session cookie (empty line to abort)")
        token = token.strip()
        if not token:
            return False
        self.site.set_token(token)
        return True


def _color(verdict: Verdict):
    if verdict.ok:
        return "green"
    if verdict.outcome is Outcome.NEEDS_WAIT:
        return "yellow"
    return "red"
