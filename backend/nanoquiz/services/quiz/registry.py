import logging
import random
import string
import threading
from dataclasses import replace
from typing import Callable, Dict, List, Optional

from nanoquiz.errors import CapacityError, NotFoundError
from nanoquiz.models import QuizDefinition
from .session import Session, now_ms


class SessionRegistry:
    """Owns every live Session in this process.

    Created once per app and handed to the socket handlers; call
    ``shutdown`` on exit so no round timer outlives its session.
    """

    def __init__(self, broadcaster, scheduler, max_sessions: int = 100, max_players: int = 100,
                 code_length: int = 4, default_time_limit: float = 20, min_time_limit: float = 5,
                 max_time_limit: float = 90, clock: Callable[[], int] = now_ms,
                 rng: Optional[random.Random] = None, logger: Optional[logging.Logger] = None):
        self.broadcaster = broadcaster
        self.scheduler = scheduler
        self.max_sessions = max_sessions
        self.max_players = max_players
        self.code_length = code_length
        self.default_time_limit = default_time_limit
        self.min_time_limit = min_time_limit
        self.max_time_limit = max_time_limit
        self._clock = clock
        self._rng = rng or random.Random()
        self.logger = logger or logging.getLogger(__name__)
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.RLock()

    @classmethod
    def from_config(cls, config, broadcaster, scheduler, logger=None):
        return cls(
            broadcaster,
            scheduler,
            max_sessions=int(config.get('MAX_GAMES', 100)),
            max_players=int(config.get('MAX_PLAYERS_PER_GAME', 100)),
            code_length=int(config.get('GAME_CODE_LENGTH', 4)),
            default_time_limit=config.get('DEFAULT_TIME_LIMIT_SEC', 20),
            min_time_limit=config.get('MIN_TIME_LIMIT_SEC', 5),
            max_time_limit=config.get('MAX_TIME_LIMIT_SEC', 90),
            logger=logger,
        )

    def __len__(self) -> int:
        return len(self._sessions)

    @property
    def is_full(self) -> bool:
        return len(self._sessions) >= self.max_sessions

    def __contains__(self, session_id) -> bool:
        return isinstance(session_id, str) and session_id.upper() in self._sessions

    def clamp_time_limit(self, value, fallback):
        # Missing or zero falls back; anything else is pinned into range
        if not value:
            value = fallback
        return max(self.min_time_limit, min(self.max_time_limit, value))

    def _generate_code(self) -> str:
        while True:
            code = ''.join(self._rng.choices(string.ascii_uppercase, k=self.code_length))
            if code not in self._sessions:
                return code

    def create_session(self, host_id: str, quiz: QuizDefinition) -> str:
        with self._lock:
            if self.is_full:
                raise CapacityError('Too many games running. Try again later.')
            default = self.clamp_time_limit(quiz.default_time_limit, self.default_time_limit)
            questions = [
                replace(q, time_limit_sec=self.clamp_time_limit(q.requested_time_limit, default))
                for q in quiz.questions
            ]
            self._rng.shuffle(questions)
            code = self._generate_code()
            self._sessions[code] = Session(
                code,
                host_id,
                quiz.title,
                questions,
                self.broadcaster,
                self.scheduler,
                on_complete=self.remove,
                clock=self._clock,
                max_players=self.max_players,
                logger=self.logger,
            )
        self.logger.info(f"[create] game={code} questions={len(questions)} live={len(self._sessions)}")
        return code

    def get(self, session_id) -> Session:
        session = None
        if isinstance(session_id, str):
            with self._lock:
                session = self._sessions.get(session_id.upper())
        if session is None:
            raise NotFoundError()
        return session

    def remove(self, session_id: str) -> None:
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is not None:
            session.close()
            self.logger.info(f"[remove] game={session_id} live={len(self._sessions)}")

    def find_by_participant(self, sid: str) -> List[Session]:
        """Every live session the sid hosts or plays in."""
        with self._lock:
            sessions = list(self._sessions.values())
        return [s for s in sessions if s.is_participant(sid)]

    def shutdown(self) -> None:
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.close()
        self.logger.info(f"[shutdown] closed {len(sessions)} sessions")
