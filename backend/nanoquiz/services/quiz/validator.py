import re
from dataclasses import dataclass
from typing import Any, Optional

from nanoquiz.models import Option, Question, QuizDefinition

MAX_NAME_LENGTH = 20

_TAG_RE = re.compile(r'<[^>]*>')
_NAME_DISALLOWED_RE = re.compile(r"[^\w\s\-'.!]", re.ASCII)


@dataclass
class QuizParseResult:
    quiz: Optional[QuizDefinition] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.quiz is not None


class _Invalid(Exception):
    pass


def _require_text(value: Any, where: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise _Invalid(f'{where} must be a non-empty string')
    return value


def _number_or_none(value: Any) -> Optional[float]:
    # bool is an int subclass; true/false are not time limits
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _parse_question(raw: Any, where: str) -> Question:
    if not isinstance(raw, dict):
        raise _Invalid(f'{where} must be an object')
    qid = _require_text(raw.get('id'), f'{where}.id')
    text = _require_text(raw.get('text'), f'{where}.text')

    raw_options = raw.get('options')
    if not isinstance(raw_options, list) or len(raw_options) < 2:
        raise _Invalid(f'{where}.options must contain at least 2 options')
    options = []
    for i, opt in enumerate(raw_options):
        if not isinstance(opt, dict):
            raise _Invalid(f'{where}.options[{i}] must be an object')
        options.append(Option(
            id=_require_text(opt.get('id'), f'{where}.options[{i}].id'),
            label=_require_text(opt.get('label'), f'{where}.options[{i}].label'),
        ))

    correct = raw.get('correctOptionIds')
    if not isinstance(correct, list) or not correct:
        raise _Invalid(f'{where}.correctOptionIds must be a non-empty list')
    for i, cid in enumerate(correct):
        _require_text(cid, f'{where}.correctOptionIds[{i}]')

    image_url = raw.get('imageUrl')
    return Question(
        id=qid,
        text=text,
        options=options,
        correct_option_ids=list(correct),
        image_url=image_url if isinstance(image_url, str) and image_url else None,
        requested_time_limit=_number_or_none(raw.get('timeLimitSeconds')),
    )


def parse_quiz(payload: Any) -> QuizParseResult:
    """Parse an untrusted quiz payload into a QuizDefinition.

    Structural checks only: correct option ids are not required to match
    any option of their question. On failure the result carries the first
    offending field and no partial quiz.
    """
    try:
        if not isinstance(payload, dict):
            raise _Invalid('quiz must be an object')
        raw_questions = payload.get('questions')
        if not isinstance(raw_questions, list) or not raw_questions:
            raise _Invalid('questions must be a non-empty list')
        title = _require_text(payload.get('title'), 'title')
        questions = [_parse_question(q, f'questions[{i}]') for i, q in enumerate(raw_questions)]
    except _Invalid as exc:
        return QuizParseResult(error=str(exc))
    return QuizParseResult(quiz=QuizDefinition(
        title=title,
        questions=questions,
        default_time_limit=_number_or_none(payload.get('defaultTimeLimitSeconds')),
    ))


def validate_quiz(payload: Any) -> bool:
    return parse_quiz(payload).ok


def sanitize_name(raw: Any) -> str:
    """Strip tags and unusual characters from a display name, cap at 20 chars."""
    text = _TAG_RE.sub('', str(raw if raw is not None else ''))
    text = _NAME_DISALLOWED_RE.sub('', text)
    return text[:MAX_NAME_LENGTH].strip()
