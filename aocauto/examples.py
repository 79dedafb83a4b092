from __future__ import annotations

import enum
import logging
import sys
from dataclasses import dataclass
from dataclasses import field
from typing import Any

from .types import PartNumber

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self


log = logging.getLogger(__name__)


class Check(enum.Enum):
    """How an example's result is verified for one part."""

    EXPECTED = "compare against the expected answer"
    CONFIRM = "ask the operator to confirm visually"
    NOTHING = "nothing to verify"


@dataclass
class Example:
    """
    A worked example from the puzzle prose. Each part may carry an expected answer
    and/or ask for visual confirmation. `parameters` are the extra values the solver
    needs for this example (e.g. a smaller iteration count), they override the
    defaults of the automaton.
    """

    input_data: str
    answers: list[Any] = field(default_factory=lambda: [None, None])
    visual_confirm: list[bool] = field(default_factory=lambda: [False, False])
    parameters: tuple = ()
    key: str | None = None

    def answer(self, part: PartNumber, expected: Any) -> Self:
        self.answers[part - 1] = expected
        return self

    def confirm(self, part: PartNumber) -> Self:
        self.visual_confirm[part - 1] = True
        return self

    def with_parameters(self, *parameters: Any) -> Self:
        self.parameters = parameters
        return self

    def expected(self, part: PartNumber) -> Any:
        return self.answers[part - 1]

    def check(self, part: PartNumber) -> Check:
        if self.answers[part - 1] is not None:
            return Check.EXPECTED
        if self.visual_confirm[part - 1]:
            return Check.CONFIRM
        return Check.NOTHING

    def can_test(self, part: PartNumber) -> bool:
        return self.check(part) is not Check.NOTHING

    def get_parameters(self, defaults: tuple = ()) -> tuple:
        return self.parameters or tuple(defaults)


class ExampleRunner:
    """
    Runs a solver against the declared examples of one part, before any answer
    computed on the real input is submitted.
    `compute(solver, part, data)` returns the solver's answer.
    """

    def __init__(self, interact, factory, compute):
        self.interact = interact
        self.factory = factory
        self.compute = compute

    @staticmethod
    def should_skip(example: Example, part: PartNumber, reset_between_parts=False) -> bool:
        # examples with nothing to verify are still run for part 1 (their solver is
        # cached and may be reused for part 2), unless solvers are rebuilt between parts
        if example.check(part) is not Check.NOTHING:
            return False
        return part == 2 or reset_between_parts or example.expected(1) is not None

    def run(self, part: PartNumber, examples, defaults=(), reset_between_parts=False) -> bool:
        """
        Returns True when every example that was run passed. All examples are run,
        even after a failure, so that every mismatch gets reported.
        """
        if not examples:
            self.interact.trace(f"* /!\\ no example for part {part}! *")
            return True
        self.interact.trace(f"* Test part {part} *")
        if not any(example.can_test(part) for example in examples):
            # at least one result must be verified before submitting for real
            log.info("no example is testable for part %s, asking for confirmation", part)
            examples[0].confirm(part)
        success = True
        for example in examples:
            if self.should_skip(example, part, reset_between_parts):
                log.debug("skipping example %r for part %s", example.key or example.input_data[:20], part)
                continue
            parameters = example.get_parameters(defaults)
            solver = self.factory.get_solver(example.input_data, True, parameters)
            answer = self.compute(solver, part, example.input_data)
            success = self.check_answer(part, answer, example) and success
        return success

    def check_answer(self, part: PartNumber, answer, example: Example) -> bool:
        trace = self.interact.trace
        expected = example.expected(part)
        if answer is None:
            trace(f"Test failed: got no answer instead of {expected} using:", "red")
            trace(example.input_data)
            return False
        check = example.check(part)
        if check is Check.NOTHING:
            return True
        if check is Check.CONFIRM:
            trace("Testing with:")
            trace(example.input_data)
            trace(
                "provided a result but no expected answer provided. "
                "Please confirm result manually (y/n). Result below."
            )
            trace(answer)
            return self.interact.ask_yes_no()
        if str(answer) != str(expected):
            trace(f"Test failed: got {answer} instead of {expected} using:", "red")
            trace(example.input_data)
            return False
        trace(f"Test succeeded: got {answer} using:", "green")
        trace(example.input_data)
        return True
