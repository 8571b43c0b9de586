from dataclasses import dataclass, field
from typing import List, Optional, Set


@dataclass(frozen=True)
class Option:
    id: str
    label: str

    def to_dict(self):
        return {'id': self.id, 'label': self.label}


@dataclass
class Question:
    id: str
    text: str
    options: List[Option]
    correct_option_ids: List[str]
    image_url: Optional[str] = None
    # Raw value from the quiz file; the registry clamps it into time_limit_sec
    requested_time_limit: Optional[float] = None
    time_limit_sec: float = 20

    @property
    def time_limit_ms(self) -> int:
        return int(self.time_limit_sec * 1000)

    def to_public_dict(self, index: int, total: int):
        """Question payload for clients. Never includes the correct options."""
        return {
            'id': self.id,
            'index': index,
            'total': total,
            'text': self.text,
            'imageUrl': self.image_url,
            'timeLimitSeconds': self.time_limit_sec,
            'options': [o.to_dict() for o in self.options],
        }


@dataclass
class QuizDefinition:
    title: str
    questions: List[Question]
    default_time_limit: Optional[float] = None


@dataclass
class Player:
    name: str
    score: int = 0
    selected_option_id: Optional[str] = None
    answered_at_ms: Optional[int] = None
    last_correct: bool = False

    @property
    def has_answered(self) -> bool:
        return self.selected_option_id is not None

    def reset_round(self) -> None:
        self.selected_option_id = None
        self.answered_at_ms = None
        self.last_correct = False

    def to_public_dict(self):
        return {'name': self.name, 'score': self.score, 'lastCorrect': bool(self.last_correct)}


@dataclass
class Round:
    start_ms: int
    end_ms: int
    awaiting: Set[str] = field(default_factory=set)
    timer: Optional[object] = None
