"""Core data schema for calendar history and derived patterns."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

CATEGORIES = ("study", "work", "creative", "health", "personal", "other")
FEELINGS = ("excellent", "good", "neutral", "tired", "frustrated")
FOCUS_VALUES = ("yes", "partial", "no")
TIME_COMPARISONS = ("more", "equal", "less")
INTERRUPTION_CAUSES = ("notifications", "people", "fatigue", "self-distraction", "other")
INTERVENTION_LEVELS = ("low", "medium", "high")
TONES = ("warm", "neutral", "direct")


@dataclass
class Block:
    """Planned time interval on the calendar."""

    id: str
    user_id: str
    start: datetime
    end: datetime
    category: str
    planned_duration_minutes: float
    actual_duration_minutes: Optional[float] = None
    completed: bool = False


@dataclass
class Task:
    """To-do item, optionally due on a given day."""

    id: str
    user_id: str
    created_at: datetime
    category: str
    completed: bool = False
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None


@dataclass
class CheckIn:
    id: str
    user_id: str
    date: date
    completed: bool


@dataclass
class CompletionFeedback:
    """Post-activity survey tied to at most one block or one task."""

    completed_at: datetime
    feeling: str
    focus: str
    time_comparison: str
    block_id: Optional[str] = None
    task_id: Optional[str] = None
    had_interruptions: bool = False
    interruption_cause: Optional[str] = None
    note: Optional[str] = None


@dataclass
class AiSettings:
    tone: str = "warm"
    intervention_level: str = "medium"
    daily_reflection_question_enabled: bool = True


@dataclass
class RangeBounds:
    """Inclusive instant window."""

    start: datetime
    end: datetime


@dataclass
class EngineInput:
    """Everything the engine needs for one user and one date range."""

    blocks: list[Block]
    tasks: list[Task]
    check_ins: list[CheckIn]
    feedback: list[CompletionFeedback]
    settings: AiSettings
    range_from: datetime
    range_to: datetime


@dataclass
class FocusHeatmap:
    days: list[str]
    slots: list[str]
    matrix: list[list[float]]


@dataclass
class DayScore:
    day_index: int
    day_name: str
    score: float
    completion_rate: float
    focus_minutes: float
    completed_blocks: int
    tasks_created_or_due: int
    tasks_completed: int


@dataclass
class DayPatternResult:
    strongest_day: Optional[str]
    weakest_day: Optional[str]
    day_scores: list[DayScore] = field(default_factory=list)


@dataclass
class CategoryScore:
    category: str
    label: str
    score: float
    completion_rate: float
    feeling_average: Optional[float]
    focus_yes_rate: float
    sample_size: int


@dataclass
class CategoryBias:
    category: str
    bias_percent: float


@dataclass
class PatternResults:
    """Bundle of detected patterns shared by the insight and summary builders."""

    best_focus_slot: Optional[str]
    day_pattern: DayPatternResult
    top_categories: list[str]
    category_scores: list[CategoryScore]
    estimation_bias: list[CategoryBias]
