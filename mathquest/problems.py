"""
Rotation over an imported problem set.

The pool is a depleting working copy of the imported problems. A draw
removes a random problem from it; when the last one is drawn the pool is
refilled from the import source, leaving out the problem just used so it
does not come straight back (unless it is the only one there is).
"""

import logging
import random
import re
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple

from mathquest.generator import GeneratedProblem, generate_math_problem
from mathquest.importer import ImportedProblem, ImportedProblemsData
from mathquest.tiles import Difficulty

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
_LEADING_NUMBER = re.compile(r"[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


@dataclass(frozen=True)
class ProblemPoolState:
    """Problems still available for drawing, and the ids drawn so far."""

    pool: Tuple[ImportedProblem, ...] = ()
    used_ids: FrozenSet[int] = field(default_factory=frozenset)


@dataclass(frozen=True)
class ProblemDraw:
    """Result of drawing the next problem."""

    problem: GeneratedProblem
    pool_state: ProblemPoolState


def initialize_problem_pool(imported: Optional[ImportedProblemsData]) -> ProblemPoolState:
    """Copy the imported problems into a fresh pool."""
    if imported is None:
        return ProblemPoolState()
    return ProblemPoolState(pool=tuple(imported.problems))


def parse_answer(text: str) -> float:
    """
    Parse an imported answer, tolerating formatted numbers like "1 055".

    Only the leading number counts, so "12cm" reads as 12 and "3/4" as 3.
    Answers that do not start with a number become 0.
    """
    match = _LEADING_NUMBER.match(_WHITESPACE.sub("", text or ""))
    if match is None:
        return 0.0
    return float(match.group())


def get_next_problem(
    difficulty: Difficulty,
    imported: Optional[ImportedProblemsData],
    pool_state: ProblemPoolState,
    rng: Optional[random.Random] = None,
) -> ProblemDraw:
    """
    Draw the next problem from the imported pool, or generate one.

    Falls back to the generator when there is no import source or the
    pool is empty. The import source itself is never modified.
    """
    rng = rng or random

    if imported is None or not pool_state.pool:
        return ProblemDraw(generate_math_problem(difficulty, rng), pool_state)

    index = rng.randrange(len(pool_state.pool))
    chosen = pool_state.pool[index]
    pool = pool_state.pool[:index] + pool_state.pool[index + 1 :]
    used_ids = pool_state.used_ids | {chosen.id}

    if not pool:
        if len(imported.problems) > 1:
            pool = tuple(p for p in imported.problems if p.id != chosen.id)
        else:
            pool = tuple(imported.problems)
        logger.debug("Problem pool refilled with %d problems", len(pool))

    problem = GeneratedProblem(question=chosen.question.strip(), answer=parse_answer(chosen.answer))
    return ProblemDraw(problem, ProblemPoolState(pool=pool, used_ids=used_ids))
