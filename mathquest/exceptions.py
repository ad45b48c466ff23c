"""
Custom exception hierarchy for the Math Quest engine.

The engine itself never raises for commands issued in the wrong state;
those are guarded no-ops. These errors cover faults on the caller's side
of the boundary: bad configuration and malformed problem files.
"""


class MathQuestError(Exception):
    """Base exception for all game-related errors."""


class ConfigError(MathQuestError, ValueError):
    """Game configuration is invalid or unsupported."""


class ProblemImportError(MathQuestError):
    """Imported problem file failed validation."""
