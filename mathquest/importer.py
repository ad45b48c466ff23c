"""
Schema and loader for imported problem files.

A problem file looks like::

    {"problemCount": "3",
     "problems": [{"id": 1, "question": "12 + 7", "answer": "19"}, ...]}

The engine trusts this shape; validation happens here, on the caller's
side, before the data is handed to ``GameEngine``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from mathquest.exceptions import ProblemImportError

logger = logging.getLogger(__name__)


class ImportedProblem(BaseModel):
    """One externally supplied question. The answer stays text until drawn."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    id: int
    question: str
    answer: str


class ImportedProblemsData(BaseModel):
    """A validated problem file."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, coerce_numbers_to_str=True)

    problem_count: str = Field(default="", alias="problemCount")
    problems: List[ImportedProblem] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_unique_ids(self) -> "ImportedProblemsData":
        seen = set()
        for problem in self.problems:
            if problem.id in seen:
                raise ValueError(f"duplicate problem id {problem.id}")
            seen.add(problem.id)
        return self

    @classmethod
    def from_problems(cls, problems: List[ImportedProblem]) -> "ImportedProblemsData":
        return cls(problem_count=str(len(problems)), problems=problems)


def load_problems(source: Union[str, Path, Mapping[str, Any]]) -> ImportedProblemsData:
    """
    Load and validate a problem file.

    Args:
        source: a path to a JSON file, a JSON string, or an already decoded mapping

    Returns:
        Validated ImportedProblemsData

    Raises:
        ProblemImportError: if the JSON cannot be decoded or an entry is missing
            its id, question or answer, or two entries share an id
    """
    if isinstance(source, Mapping):
        raw = source
    else:
        text = _read_source(source)
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise ProblemImportError(f"Problem file is not valid JSON: {e}") from e

    try:
        data = ImportedProblemsData.model_validate(raw)
    except ValidationError as e:
        raise ProblemImportError(f"Problem file failed validation: {e}") from e

    logger.info("Imported %d problems", len(data.problems))
    return data


def _read_source(source: Union[str, Path]) -> str:
    if isinstance(source, str) and source.lstrip().startswith(("{", "[")):
        return source
    path = Path(source)
    if not path.exists():
        raise ProblemImportError(f"Problem file not found: {source}")
    return path.read_text(encoding="utf-8")
