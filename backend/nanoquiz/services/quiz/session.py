import logging
import threading
import time
from typing import Callable, Dict, List, Optional

from nanoquiz.errors import AuthorizationError, CapacityError, StateError, ValidationError
from nanoquiz.models import Player, Question, Round
from .scoring import compute_points, is_correct
from .validator import sanitize_name


def now_ms() -> int:
    return int(time.time() * 1000)


class Session:
    """One live quiz: lobby, rounds, reveal, completion.

    States: lobby -> round_active(i) -> round_revealed(i) -> ... -> completed.
    A round ends exactly once, from whichever comes first of the deadline
    timer, the last awaited answer, or the last player leaving. Every
    public method takes the session lock, so handlers for one session
    never interleave.
    """

    def __init__(self, session_id: str, host_id: str, title: str, questions: List[Question],
                 broadcaster, scheduler, on_complete: Optional[Callable[[str], None]] = None,
                 clock: Callable[[], int] = now_ms, max_players: int = 100,
                 logger: Optional[logging.Logger] = None):
        self.id = session_id
        self.host_id = host_id
        self.title = title
        self.questions = questions
        self.players: Dict[str, Player] = {}
        self.started = False
        self.current_index = -1
        self.round: Optional[Round] = None
        self.completed = False
        self.max_players = max_players
        self.broadcaster = broadcaster
        self.scheduler = scheduler
        self._on_complete = on_complete
        self._clock = clock
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.RLock()

    @property
    def state(self) -> str:
        if self.completed:
            return 'completed'
        if not self.started:
            return 'lobby'
        return 'round_active' if self.round is not None else 'round_revealed'

    @property
    def current_question(self) -> Optional[Question]:
        if 0 <= self.current_index < len(self.questions):
            return self.questions[self.current_index]
        return None

    def is_participant(self, sid: str) -> bool:
        return sid == self.host_id or sid in self.players

    def leaderboard(self) -> List[dict]:
        entries = [p.to_public_dict() for p in self.players.values()]
        return sorted(entries, key=lambda e: e['score'], reverse=True)

    def lobby_payload(self) -> dict:
        return {'players': [p.name for p in self.players.values()], 'gameId': self.id, 'title': self.title}

    def broadcast_lobby(self) -> None:
        self.broadcaster.to_room(self.id, 'lobby:update', self.lobby_payload())

    # ---- lobby ----

    def add_player(self, participant_id: str, raw_name) -> Player:
        with self._lock:
            if self.started or self.completed:
                raise StateError('Game not found or already started')
            if participant_id not in self.players and len(self.players) >= self.max_players:
                raise CapacityError('Game is full.')
            player = Player(name=sanitize_name(raw_name))
            self.players[participant_id] = player
            self.logger.info(f"[join] game={self.id} players={len(self.players)}")
            self.broadcast_lobby()
            return player

    def start(self, caller_id: str) -> None:
        with self._lock:
            self._require_host(caller_id)
            if self.started or self.completed:
                raise StateError('Game already started')
            self.started = True
            self.logger.info(f"[start] game={self.id} questions={len(self.questions)} players={len(self.players)}")
            self.broadcaster.to_room(self.id, 'game:started', {'title': self.title})
            self._advance()

    def advance(self, caller_id: str) -> None:
        with self._lock:
            self._require_host(caller_id)
            if not self.started or self.completed:
                raise StateError('Game has not started')
            if self.round is not None:
                raise StateError('Round still in progress')
            self._advance()

    def _require_host(self, caller_id: str) -> None:
        if caller_id != self.host_id:
            raise AuthorizationError()

    def _advance(self) -> None:
        self.current_index += 1
        question = self.current_question
        if question is None:
            self._complete()
            return

        start_ms = self._clock()
        for p in self.players.values():
            p.reset_round()
        current = Round(start_ms=start_ms, end_ms=start_ms + question.time_limit_ms, awaiting=set(self.players))
        current.timer = self.scheduler.call_later(
            question.time_limit_sec,
            lambda: self._on_deadline(current),
            key=f"game={self.id} index={self.current_index}",
        )
        self.round = current
        self.logger.info(
            f"[round-start] game={self.id} index={self.current_index} limit={question.time_limit_sec}s awaiting={len(current.awaiting)}"
        )
        self.broadcaster.to_room(
            self.id, 'question:show', question.to_public_dict(self.current_index, len(self.questions))
        )
        # Nobody to wait for: reveal right away
        if not current.awaiting:
            self.end_round()

    # ---- answers and reveal ----

    def submit_answer(self, participant_id: str, question_id, option_id) -> None:
        with self._lock:
            if self.round is None:
                raise StateError('No active round')
            player = self.players.get(participant_id)
            if player is None:
                raise StateError('Not a player in this game')
            question = self.current_question
            if question is None or question.id != question_id:
                raise StateError('Answer is for a different question')
            if player.has_answered:
                raise StateError('Already answered this round')
            if not isinstance(option_id, str) or not option_id:
                raise ValidationError('Invalid option.')

            player.selected_option_id = option_id
            player.answered_at_ms = self._clock()
            self.round.awaiting.discard(participant_id)
            self.broadcaster.to_participant(participant_id, 'player:locked', {'optionId': option_id})
            if not self.round.awaiting:
                self.end_round()

    def _on_deadline(self, expected: Round) -> None:
        with self._lock:
            if self.round is not expected:
                self.logger.info(f"[timer-stale] game={self.id} round already revealed")
                return
            self.end_round()

    def end_round(self) -> bool:
        """Score and reveal the active round. Returns False if there is none."""
        with self._lock:
            current = self.round
            question = self.current_question
            if current is None or question is None:
                return False
            if current.timer is not None:
                current.timer.cancel()
            self.round = None

            tally = {o.id: 0 for o in question.options}
            for p in self.players.values():
                correct = is_correct(p.selected_option_id, question.correct_option_ids)
                p.last_correct = correct
                p.score += compute_points(question.time_limit_ms, current.end_ms, p.answered_at_ms, correct)
                if p.selected_option_id in tally:
                    tally[p.selected_option_id] += 1
            # Same order as the options in question:show
            counts = [tally[o.id] for o in question.options]

            self.logger.info(f"[reveal] game={self.id} index={self.current_index} answered={sum(counts)}")
            self.broadcaster.to_room(self.id, 'question:reveal', {
                'correctOptionIds': list(question.correct_option_ids),
                'index': self.current_index,
                'total': len(self.questions),
                'leaderboard': self.leaderboard(),
                'counts': counts,
            })
            self.broadcaster.to_participant(self.host_id, 'host:canAdvance', {'canAdvance': True})
            return True

    # ---- teardown ----

    def remove_participant(self, participant_id: str) -> bool:
        """Handle a disconnect. The host leaving cancels the whole session."""
        with self._lock:
            if self.completed:
                return False
            if participant_id == self.host_id:
                self.cancel('Host disconnected')
                return True
            if self.players.pop(participant_id, None) is None:
                return False
            self.logger.info(f"[leave] game={self.id} players={len(self.players)}")
            self.broadcast_lobby()
            if self.round is not None:
                self.round.awaiting.discard(participant_id)
                if not self.players or not self.round.awaiting:
                    self.end_round()
            return True

    def cancel(self, reason: str) -> None:
        with self._lock:
            if self.completed:
                return
            self.close()
            self.logger.info(f"[game-cancelled] game={self.id} reason={reason}")
            self.broadcaster.to_room(self.id, 'game:cancelled', {'reason': reason})
            self._notify_complete()

    def _complete(self) -> None:
        board = self.leaderboard()
        self.close()
        self.logger.info(f"[game-over] game={self.id} players={len(board)}")
        self.broadcaster.to_room(self.id, 'game:over', {'leaderboard': board})
        self._notify_complete()

    def close(self) -> None:
        """Mark completed and cancel any pending deadline. No broadcasts."""
        with self._lock:
            self.completed = True
            if self.round is not None:
                if self.round.timer is not None:
                    self.round.timer.cancel()
                self.round = None

    def _notify_complete(self) -> None:
        if self._on_complete is not None:
            self._on_complete(self.id)
