import logging
import time
from datetime import datetime

from .utils import AOC_TZ


log = logging.getLogger(__name__)


class Solver:
    """
    Base class for puzzle solvers. Override `part1` and `part2`; returning None means
    "no answer yet". Override `setup` to declare the day, the worked examples and any
    extra parameters, using the automaton it receives, e.g.

        def setup(self, automaton):
            automaton.day = 6
            automaton.add_example("3,4,3,1,2", part1=5934, part2=26984457539)

    Extra parameters (say, an iteration count that differs between the examples and
    the real input) are handed to `init_run` before any answer is computed.
    """

    is_example = False
    parameters = ()

    def setup(self, automaton):
        pass

    def init_run(self, is_example, *parameters):
        self.is_example = is_example
        self.parameters = parameters

    def part1(self, data):
        return None

    def part2(self, data):
        return None


class ParsingSolver(Solver):
    """
    Solver which parses its input once, then answers from the parsed state. Override
    `parse` and `answer1` / `answer2`. Parsing happens again only when the data
    changes between calls.
    """

    _data = None

    def _load(self, data):
        if data != self._data:
            self._data = data
            self.parse(data)

    def part1(self, data):
        self._load(data)
        return self.answer1()

    def part2(self, data):
        self._load(data)
        return self.answer2()

    def parse(self, data):
        raise NotImplementedError

    def answer1(self):
        return None

    def answer2(self):
        return None


def _split_lines(data):
    # a trailing newline does not make an extra line, empty lines inside are kept
    lines = data.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


class LinesSolver(ParsingSolver):
    """The input is handed to `parse_lines` as a list of lines."""

    def parse(self, data):
        self.parse_lines(_split_lines(data))

    def parse_lines(self, lines):
        raise NotImplementedError


class LineParserSolver(ParsingSolver):
    """The input is parsed one line at a time, by `parse_line(line, index, line_count)`."""

    def parse(self, data):
        lines = _split_lines(data)
        for i, line in enumerate(lines):
            self.parse_line(line, i, len(lines))

    def parse_line(self, line, index, line_count):
        raise NotImplementedError


class BlockParserSolver(LinesSolver):
    """
    The input is a series of blocks separated by empty lines. Each block is handed to
    `parse_block(lines, index)`.
    """

    def parse_lines(self, lines):
        block = []
        index = 0
        for line in lines:
            if line:
                block.append(line)
                continue
            self.parse_block(block, index)
            block = []
            index += 1
        self.parse_block(block, index)

    def parse_block(self, lines, index):
        raise NotImplementedError


class SolverFactory:
    """
    Builds solver instances. While `cache_active`, the instance built for a given
    input and parameters is reused, so that work done for part 1 is available to
    part 2. Disable the cache to get a fresh solver every time.
    """

    def __init__(self, builder):
        self.builder = builder
        self.cache_active = True
        self._solvers = {}

    @classmethod
    def of(cls, solver):
        """Factory for a solver class, a zero-arg callable, a solver instance, or a factory."""
        if isinstance(solver, SolverFactory):
            return solver
        if isinstance(solver, Solver):
            return cls(type(solver))
        if callable(solver):
            return cls(solver)
        raise TypeError(f"can't build solvers from {solver!r}")

    def get_solver(self, data, is_example=False, parameters=()):
        parameters = tuple(parameters)
        key = (data, repr(parameters))
        if self.cache_active and key in self._solvers:
            return self._solvers[key]
        solver = self.builder()
        solver.init_run(is_example, *parameters)
        if self.cache_active:
            self._solvers[key] = solver
        return solver


def compute_answer(solver, part, data, interact):
    """Run one part of a solver against `data`, narrating how long it took."""
    now = datetime.now(tz=AOC_TZ)
    interact.trace(f"Computing answer {part} ({now:%H:%M:%S}).")
    t0 = time.perf_counter()
    if part == 1:
        answer = solver.part1(data)
    else:
        answer = solver.part2(data)
    elapsed = time.perf_counter() - t0
    if elapsed < 2:
        took = f"{elapsed * 1000:.0f} ms"
    else:
        took = f"{elapsed:.2f}s"
    interact.trace(f"Took {took}.")
    log.debug("part %s answer %r", part, answer)
    return answer
