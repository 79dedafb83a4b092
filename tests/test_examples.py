import pytest

from aocauto.examples import Check
from aocauto.examples import Example
from aocauto.examples import ExampleRunner
from aocauto.solver import compute_answer
from aocauto.solver import Solver
from aocauto.solver import SolverFactory


class CountingSolver(Solver):
    built = 0

    def __init__(self):
        type(self).built += 1

    def part1(self, data):
        return len(data)

    def part2(self, data):
        return data.upper()


class NoAnswer(Solver):
    pass


@pytest.fixture(autouse=True)
def reset_counter():
    CountingSolver.built = 0


def make_runner(console, solver=CountingSolver):
    factory = SolverFactory.of(solver)

    def compute(s, part, data):
        return compute_answer(s, part, data, console)

    return ExampleRunner(console, factory, compute)


def test_check_kinds():
    example = Example("abc").answer(1, 3).confirm(2)
    assert example.check(1) is Check.EXPECTED
    assert example.check(2) is Check.CONFIRM
    assert Example("abc").check(1) is Check.NOTHING
    assert Example("abc").answer(1, 0).check(1) is Check.EXPECTED


def test_parameters_override_defaults():
    assert Example("x").get_parameters((1, 2)) == (1, 2)
    assert Example("x").with_parameters(5).get_parameters((1, 2)) == (5,)


def test_passing_example(console):
    runner = make_runner(console)
    assert runner.run(1, [Example("abc").answer(1, 3)])
    assert "Test succeeded: got 3 using:" in console.lines


def test_comparison_is_on_text(console):
    runner = make_runner(console)
    assert runner.run(1, [Example("abc").answer(1, "3")])


def test_failing_example(console):
    runner = make_runner(console)
    assert not runner.run(1, [Example("abc").answer(1, 7)])
    assert "Test failed: got 3 instead of 7 using:" in console.lines
    assert "abc" in console.lines


def test_every_example_runs_after_a_failure(console):
    runner = make_runner(console)
    examples = [Example("abc").answer(1, 7), Example("abcd").answer(1, 4)]
    assert not runner.run(1, examples)
    assert "Test succeeded: got 4 using:" in console.lines


def test_no_answer_is_failure(console):
    runner = make_runner(console, NoAnswer)
    assert not runner.run(1, [Example("abc").answer(1, 3)])
    assert "Test failed: got no answer instead of 3 using:" in console.lines


def test_no_examples_is_a_warning(console):
    runner = make_runner(console)
    assert runner.run(2, [])
    assert "* /!\\ no example for part 2! *" in console.lines


def test_untestable_examples_ask_for_confirmation(console):
    console.replies = ["y"]
    runner = make_runner(console)
    examples = [Example("abc"), Example("xyz")]
    assert runner.run(1, examples)
    assert examples[0].check(1) is Check.CONFIRM
    assert console.prompts == [None]
    assert "3" in console.lines


def test_declined_confirmation_fails(console):
    console.replies = ["n"]
    runner = make_runner(console)
    assert not runner.run(1, [Example("abc")])


def test_empty_confirmation_is_a_no(console):
    console.replies = [""]
    runner = make_runner(console)
    assert not runner.run(2, [Example("abc").confirm(2)])


def test_skip_rule():
    skip = ExampleRunner.should_skip
    nothing = Example("abc")
    assert not skip(nothing, 1)
    assert skip(nothing, 2)
    assert skip(nothing, 1, reset_between_parts=True)
    assert not skip(Example("abc").answer(2, 5), 2)
    assert not skip(Example("abc").confirm(2), 2, reset_between_parts=True)
    assert skip(Example("abc").answer(1, 3), 2)


def test_unverified_part1_example_still_runs(console):
    # nothing to check for part 1, but the solver built for it is reused by part 2
    runner = make_runner(console)
    examples = [Example("abc").answer(2, "ABC"), Example("xyz").answer(1, 3)]
    assert runner.run(1, examples)
    assert CountingSolver.built == 2
    assert runner.run(2, examples)
    assert CountingSolver.built == 2
    assert "Test succeeded: got ABC using:" in console.lines


def test_solvers_rebuilt_when_cache_disabled(console):
    runner = make_runner(console)
    runner.factory.cache_active = False
    examples = [Example("abc").answer(1, 3).answer(2, "ABC")]
    assert runner.run(1, examples, reset_between_parts=True)
    assert runner.run(2, examples, reset_between_parts=True)
    assert CountingSolver.built == 2


def test_parameters_reach_the_solver(console):
    seen = []

    class Parametrized(Solver):
        def part1(self, data):
            seen.append((self.is_example, self.parameters))
            return 1

    runner = make_runner(console, Parametrized)
    examples = [Example("a").answer(1, 1), Example("b").answer(1, 1).with_parameters(10)]
    assert runner.run(1, examples, defaults=(80,))
    assert seen == [(True, (80,)), (True, (10,))]
