"""
Arithmetic problem generator.
"""

import random
from dataclasses import dataclass
from typing import Optional

from mathquest.tiles import Difficulty


@dataclass(frozen=True)
class GeneratedProblem:
    """A question and its numeric answer."""

    question: str
    answer: float


def generate_math_problem(
    difficulty: Difficulty, rng: Optional[random.Random] = None
) -> GeneratedProblem:
    """
    Produce a question/answer pair for a difficulty tier.

    Easy:   a, b in [1, 20], + or - (answers may be negative)
    Medium: a in [10, 59], b in [5, 34], +, - or *
    Hard:   a, b in [5, 24] for *, or an exact division built backwards
            from a divisor in [2, 11] and a quotient in [5, 24]
    """
    rng = rng or random

    if difficulty == Difficulty.EASY:
        a = rng.randint(1, 20)
        b = rng.randint(1, 20)
        operation = rng.choice(["+", "-"])
        answer = a + b if operation == "+" else a - b

    elif difficulty == Difficulty.MEDIUM:
        a = rng.randint(10, 59)
        b = rng.randint(5, 34)
        operation = rng.choice(["+", "-", "*"])
        if operation == "+":
            answer = a + b
        elif operation == "-":
            answer = a - b
        else:
            answer = a * b

    elif difficulty == Difficulty.HARD:
        operation = rng.choice(["*", "/"])
        if operation == "*":
            a = rng.randint(5, 24)
            b = rng.randint(5, 24)
            answer = a * b
        else:
            b = rng.randint(2, 11)
            answer = rng.randint(5, 24)
            a = b * answer

    else:
        a, b, operation, answer = 0, 0, "+", 0

    return GeneratedProblem(question=f"{a} {operation} {b}", answer=answer)
