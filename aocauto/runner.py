import logging
import os
import pkgutil
import sys
from argparse import ArgumentParser
from pathlib import Path

import pebble.concurrent

from .answers import Answer
from .examples import Example
from .examples import ExampleRunner
from .exceptions import AocError
from .exceptions import ConfigurationError
from .exceptions import DeadTokenError
from .exceptions import ExampleError
from .interact import Console
from .models import AOCAUTO_DATA_DIR
from .models import ManualSite
from .models import PuzzleSite
from .progress import ProgressStore
from .responses import SETUP_DOCUMENTATION
from .solver import compute_answer
from .solver import SolverFactory
from .submit import AnswerSubmitter
from .utils import current_day
from .utils import LAST_DAY
from .utils import most_recent_year
from .utils import PendingWrite


log = logging.getLogger(__name__)

# how long teardown waits for the last cache write before giving up on it
DRAIN_TIMEOUT = 0.5


@pebble.concurrent.thread
def _fetch_in_background(site):
    return site.fetch_input()


class Automaton:
    """
    Runs a solver for one puzzle day: check it against the worked examples, get the
    personal input, then compute and submit both answers. Progress (answers tried,
    known bounds, solved parts) is persisted between runs.

    Solvers describe their day from `Solver.setup`, using the builder methods below.
    """

    def __init__(self, year=None, user=None, offline=False, interact=None, data_dir=None):
        if year is None:
            year = most_recent_year()
        self.year = year
        self.user = user
        self.offline = offline
        self.interact = interact or Console()
        if data_dir is None:
            data_dir = AOCAUTO_DATA_DIR
        self.data_dir = Path(data_dir)
        self.writer = PendingWrite()
        self._input_data = None
        self._reset()

    def __repr__(self):
        return f"<{type(self).__name__}({self.year}, day={self.day})>"

    def _reset(self):
        self.day = 0
        self.examples = []
        self.defaults = [(), ()]
        self.reset_between_parts = False
        self.result_is_visual = [False, False]
        self.site = None
        self.store = None
        self.unit_tests = []
        self.writer.failed = False

    def add_example(self, input_data, part1=None, part2=None, *parameters, key=None, force=True):
        """
        Declare a worked example, with the expected answer of either or both parts.
        Extra `parameters` replace the defaults (see `set_default`) when the solver is
        run against this example. Set `key` to share the example with part 2 later on
        (see `reuse_example`). Unless `force`, an example already declared with the
        same input is updated instead of adding a new one.
        """
        if not isinstance(input_data, str) or not input_data:
            raise ExampleError(f"example input must be a non-empty string, got {input_data!r}")
        example = None
        if not force:
            example = next((e for e in self.examples if e.input_data == input_data), None)
        if example is None:
            example = Example(input_data)
            self.examples.append(example)
        if part1 is not None:
            example.answer(1, part1)
        if part2 is not None:
            example.answer(2, part2)
        if parameters:
            example.with_parameters(*parameters)
        if key is not None:
            example.key = key
        return example

    def reuse_example(self, key, part2):
        """Give the part 2 answer of the example declared earlier with this key."""
        example = next((e for e in self.examples if e.key == key), None)
        if example is None:
            self.interact.report_error(f"Example {key!r} was not declared. Skipping it.")
            return None
        return example.answer(2, part2)

    def set_default(self, part, *parameters):
        """Extra parameters for the real input, and for examples which don't override them."""
        self.defaults[part - 1] = parameters

    def visual_result(self, part):
        """The answer has to be read by a human (e.g. letters drawn in ascii art)."""
        self.result_is_visual[part - 1] = True

    def add_unit_test(self, func, expected, *args):
        """
        Check a helper of the solver before anything else: `func(*args)` must return
        `expected`, or the day is aborted before the examples are even tried.
        """
        self.unit_tests.append((func, expected, args))

    def load_input(self, path):
        """Use the contents of a local file as the personal puzzle input."""
        self._input_data = Path(path).read_text(encoding="utf-8")

    def run_day(self, solver):
        """
        Returns True when every part is solved, either during this run or a previous one.
        Progress is saved, even when the run is interrupted by an exception.
        """
        factory = SolverFactory.of(solver)
        try:
            self._reset()
            if not self._setup(factory):
                return False
            self.site = self._make_site()
            self.store = ProgressStore(self.year, self.data_dir)
            progress = self.store.load(self.day)
            if not self._check_state(progress):
                return True
            factory.cache_active = not self.reset_between_parts
            pending = self._prefetch_input()
            runner = ExampleRunner(self.interact, factory, self._compute)
            submitter = AnswerSubmitter(self.site, self.store, self.interact, self.writer)

            examples_passed = runner.run(1, self.examples, self.defaults[0], self.reset_between_parts)
            data = self._await_input(pending)
            if not examples_passed:
                return False
            answer = self._real_answer(factory, 1, data)
            state = progress.first
            if state.solved:
                self.interact.trace(f"* Answer 1 already solved: {state.answer} *")
                fresh = Answer.of(answer)
                if fresh is None or fresh.text != state.answer:
                    self.interact.trace("Solver no longer provides correct answer. Continue?")
                    if not self.interact.ask_yes_no():
                        return False
            elif not submitter.submit(1, answer):
                return False

            if self.day == LAST_DAY:
                self.interact.trace(f"* Only one question on day {self.day}. You're done! *", "green")
                return True

            if not runner.run(2, self.examples, self.defaults[1], self.reset_between_parts):
                return False
            answer = self._real_answer(factory, 2, data)
            return submitter.submit(2, answer)
        finally:
            self._teardown()

    def _setup(self, factory):
        solver = factory.builder()
        solver.setup(self)
        if not self.examples:
            self.interact.trace("Warning: no example provided.")
        if not self.day:
            try:
                self.day = current_day()
            except ConfigurationError:
                self.interact.report_error("Error: please specify the target day in setup, e.g. automaton.day = 1")
                return False
            self.interact.trace(f"Warning: day not set, assuming day {self.day}.")
        if not 1 <= self.day <= LAST_DAY:
            self.interact.report_error(f"Error: day must be between 1 and {LAST_DAY}, got {self.day}")
            return False
        log.info("running %d/%02d", self.year, self.day)
        return self._run_unit_tests()

    def _run_unit_tests(self):
        for func, expected, args in self.unit_tests:
            result = func(*args)
            name = getattr(func, "__name__", repr(func))
            call = f"{name}({','.join(_show(a) for a in args)})= {_show(result)}"
            if result is not None and result == expected:
                self.interact.trace(f"Unit Test succeeded. {call}")
                continue
            self.interact.trace(f"Unit Test failed. {call} instead of {_show(expected)}")
            return False
        return True

    def _make_site(self):
        if self.offline:
            return ManualSite(self.year, self.day, self.interact)
        return PuzzleSite(self.year, self.day, user=self.user, data_dir=self.data_dir)

    def _check_state(self, progress):
        if not progress.solved:
            return True
        self.interact.trace(
            f"Day {self.day} has already been solved (first part: {progress.first.answer}, "
            f"second part: {progress.second.answer}). Nothing to do."
        )
        return self.interact.ask_yes_no("Do you want to run it anyway?")

    def _prefetch_input(self):
        if self._input_data is not None or not self.site.remote:
            return None
        log.debug("prefetching input for %d/%02d", self.year, self.day)
        return _fetch_in_background(self.site)

    def _await_input(self, pending):
        if self._input_data is not None:
            return self._input_data
        try:
            if pending is None:
                data = self.site.fetch_input()
            else:
                data = pending.result()
        except DeadTokenError as err:
            self.interact.report_error(f"Failed to get your puzzle input: {err}")
            self.interact.trace(SETUP_DOCUMENTATION)
            token = self.interact.ask_input("Please provide the session cookie (empty line to abort)")
            token = token.strip()
            if not token:
                raise
            self.site.set_token(token)
            data = self.site.fetch_input()
        path = self.site.input_data_path
        if path is not None and not path.exists():
            self.writer.start(path, data, read_only=True)
        return data

    def _compute(self, solver, part, data):
        return compute_answer(solver, part, data, self.interact)

    def _real_answer(self, factory, part, data):
        self.interact.trace(f"* Computing answer {part} from your input. *")
        solver = factory.get_solver(data, False, self.defaults[part - 1])
        answer = self._compute(solver, part, data)
        if self.result_is_visual[part - 1]:
            self.interact.trace("Visual result:")
            self.interact.trace(answer)
            manual = self.interact.ask_input("Please input answer (empty to keep the same):")
            if manual.strip():
                answer = manual.strip()
        self.interact.trace(f"* Attempting {answer} *")
        return answer

    def _teardown(self):
        if self.store is not None and self.store.progress is not None:
            self.store.save()
        try:
            done = self.writer.wait(timeout=DRAIN_TIMEOUT)
        except OSError as err:
            log.error("failed to cache puzzle data: %r", err)
            done = False
        if not done or self.writer.failed:
            self.interact.report_error("Local caching of puzzle data may have failed.")


def _show(value):
    if isinstance(value, str):
        return f'"{value}"'
    return str(value)


def main():
    """
    Check a solver against its worked examples, then submit its answers for your
    personal puzzle input.
    """
    parser = ArgumentParser(description="AoC automaton")
    parser.add_argument(
        "solver",
        help="The solver to run, as module:Class (e.g. day06:Lanternfish).",
    )
    parser.add_argument(
        "-y",
        "--year",
        type=int,
        default=most_recent_year(),
        help="AoC year of the puzzle (default: %(default)s).",
    )
    parser.add_argument(
        "-i",
        "--input",
        metavar="FILE",
        type=Path,
        help="Use this file as your puzzle input, instead of downloading it.",
    )
    parser.add_argument(
        "-o",
        "--offline",
        action="store_true",
        help=(
            "Don't talk to adventofcode.com. "
            "The input is typed in and each answer is confirmed by hand."
        ),
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        help=(
            "Increased logging (-v INFO, -vv DEBUG). "
            "Default level is logging.WARNING."
        ),
    )
    args = parser.parse_args()
    if args.verbose is None:
        log_level = logging.WARNING
    elif args.verbose == 1:
        log_level = logging.INFO
    else:
        log_level = logging.DEBUG
    logging.basicConfig(level=log_level)

    # solvers usually live next to where the command is run from
    sys.path.insert(0, os.getcwd())
    try:
        solver = pkgutil.resolve_name(args.solver)
    except (ImportError, AttributeError, ValueError) as err:
        parser.error(f"can't load solver {args.solver!r}: {err}")
    automaton = Automaton(year=args.year, offline=args.offline)
    if args.input is not None:
        try:
            automaton.load_input(args.input)
        except OSError as err:
            parser.error(f"can't read input file: {err}")
    try:
        ok = automaton.run_day(solver)
    except AocError as err:
        print(f"{type(err).__name__}: {err}", file=sys.stderr)
        sys.exit(1)
    sys.exit(0 if ok else 1)
