import logging
import sys

from .utils import colored


log = logging.getLogger(__name__)


class Console:
    """
    Terminal interaction with the operator: narration of what the automaton is doing,
    error reports, and the few questions that need a human (yes/no confirmations, a
    fresh session token, puzzle input typed by hand).
    """

    def trace(self, message, color=None):
        print(colored(str(message), color))

    def report_error(self, message):
        log.debug("reporting error %r", message)
        print(colored(str(message), "red"), file=sys.stderr)

    def ask_input(self, prompt=None):
        if prompt is not None:
            self.trace(prompt)
        try:
            return input()
        except EOFError:
            # stdin closed: reads as a "no", or an empty (abort) reply
            log.debug("no input available")
            return ""

    def ask_yes_no(self, prompt=None):
        # anything starting with y or Y is a yes. empty input is a no.
        reply = self.ask_input(prompt).strip()
        return reply[:1] in {"y", "Y"}

    def ask_multiline(self, prompt=None):
        """Read lines until two consecutive empty lines, which are not kept."""
        if prompt is not None:
            self.trace(prompt)
        lines = []
        while True:
            try:
                line = input()
            except EOFError:
                break
            if not line and lines and not lines[-1]:
                lines.pop()
                break
            lines.append(line)
        return "\n".join(lines)
