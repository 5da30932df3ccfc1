"""
Value types shared by the generation engine.
"""
import enum
from dataclasses import dataclass, field
from typing import Any, List, Optional


class Difficulty(str, enum.Enum):
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


class QuestionType(str, enum.Enum):
    UNIQUE_CHOICE = "UNIQUE_CHOICE"
    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    TRUE_FALSE = "TRUE_FALSE"
    SHORT_ANSWER = "SHORT_ANSWER"


class GenerationMode(str, enum.Enum):
    """How the difficulty split of a new quiz is decided."""
    RANDOM = "RANDOM"
    ADAPTIVE = "ADAPTIVE"


@dataclass
class GenerationRequest:
    user_id: Optional[str]
    category_id: Optional[int]
    total: int
    quiz_id: Optional[int] = None
    mode_override: Optional[GenerationMode] = None
    difficulty_filter: Optional[Difficulty] = None  # informational only


@dataclass(frozen=True)
class Quota:
    """Per-difficulty question counts."""
    easy: int
    medium: int
    hard: int

    def sum(self) -> int:
        return self.easy + self.medium + self.hard

    def for_difficulty(self, difficulty: Difficulty) -> int:
        return {
            Difficulty.EASY: self.easy,
            Difficulty.MEDIUM: self.medium,
            Difficulty.HARD: self.hard,
        }[difficulty]

    def as_dict(self) -> dict:
        return {"easy": self.easy, "medium": self.medium, "hard": self.hard, "sum": self.sum()}


@dataclass(frozen=True)
class Accuracy:
    """Share of correct answers per difficulty, each in [0, 1]."""
    easy: float = 0.5
    medium: float = 0.5
    hard: float = 0.5


@dataclass
class GenerationResult:
    quiz_id: int
    attempt_id: int
    questions: List[Any] = field(default_factory=list)
    mode: Optional[GenerationMode] = None
    quota: Optional[Quota] = None
