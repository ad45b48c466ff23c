import random

import pytest

from mathquest.importer import ImportedProblem, ImportedProblemsData
from mathquest.problems import (
    ProblemPoolState,
    get_next_problem,
    initialize_problem_pool,
    parse_answer,
)
from mathquest.tiles import Difficulty


class TestParseAnswer:
    def test_plain_number(self):
        assert parse_answer("42") == 42.0

    def test_internal_whitespace_is_ignored(self):
        assert parse_answer("1 055") == 1055.0
        assert parse_answer(" -3 .5 ") == -3.5

    def test_unparseable_becomes_zero(self):
        assert parse_answer("seven") == 0.0
        assert parse_answer("") == 0.0
        assert parse_answer("nan") == 0.0
        assert parse_answer("inf") == 0.0

    def test_only_leading_number_counts(self):
        assert parse_answer("12cm") == 12.0
        assert parse_answer("3/4") == 3.0
        assert parse_answer("1_055") == 1.0
        assert parse_answer("2.5e2 points") == 250.0

    def test_infinity_spelled_out(self):
        assert parse_answer("-Infinity") == float("-inf")


class TestPool:
    def test_initialize_copies_problems(self, three_problems):
        state = initialize_problem_pool(three_problems)
        assert [p.id for p in state.pool] == [1, 2, 3]
        assert state.used_ids == frozenset()

    def test_initialize_without_source_is_empty(self):
        state = initialize_problem_pool(None)
        assert state.pool == ()
        assert state.used_ids == frozenset()

    def test_draw_removes_problem_and_records_id(self, three_problems):
        state = initialize_problem_pool(three_problems)
        draw = get_next_problem(Difficulty.EASY, three_problems, state, random.Random(1))

        assert len(draw.pool_state.pool) == 2
        assert len(draw.pool_state.used_ids) == 1
        (used_id,) = draw.pool_state.used_ids
        assert used_id not in {p.id for p in draw.pool_state.pool}

    def test_source_is_never_modified(self, three_problems):
        state = initialize_problem_pool(three_problems)
        rng = random.Random(5)
        for _ in range(6):
            state = get_next_problem(Difficulty.EASY, three_problems, state, rng).pool_state
        assert [p.id for p in three_problems.problems] == [1, 2, 3]

    def test_exhaustion_refills_without_last_problem(self, three_problems):
        """Three draws empty the pool; the refill leaves out the problem just used."""
        state = initialize_problem_pool(three_problems)
        rng = random.Random(3)
        drawn = []
        for _ in range(3):
            draw = get_next_problem(Difficulty.EASY, three_problems, state, rng)
            drawn.append(draw.problem.question)
            state = draw.pool_state

        assert sorted(drawn) == sorted(p.question for p in three_problems.problems)
        last = next(p for p in three_problems.problems if p.question == drawn[-1])
        assert len(state.pool) == 2
        assert last.id not in {p.id for p in state.pool}

        fourth = get_next_problem(Difficulty.EASY, three_problems, state, rng)
        assert fourth.problem.question != drawn[-1]

    def test_single_problem_comes_back(self):
        source = ImportedProblemsData.from_problems(
            [ImportedProblem(id=9, question="6 * 7", answer="42")]
        )
        state = initialize_problem_pool(source)
        rng = random.Random(0)

        first = get_next_problem(Difficulty.HARD, source, state, rng)
        second = get_next_problem(Difficulty.HARD, source, first.pool_state, rng)

        assert first.problem.answer == 42.0
        assert second.problem.question == "6 * 7"
        assert [p.id for p in second.pool_state.pool] == [9]

    def test_answer_text_is_parsed(self, three_problems):
        state = ProblemPoolState(pool=(three_problems.problems[2],))
        draw = get_next_problem(Difficulty.EASY, three_problems, state, random.Random(0))
        assert draw.problem.question == "1 000 + 55"
        assert draw.problem.answer == 1055.0

    @pytest.mark.parametrize("source", [None, ImportedProblemsData.from_problems([])])
    def test_falls_back_to_generator(self, source):
        state = initialize_problem_pool(source)
        draw = get_next_problem(Difficulty.EASY, source, state, random.Random(2))
        assert draw.pool_state == state
        assert " " in draw.problem.question
