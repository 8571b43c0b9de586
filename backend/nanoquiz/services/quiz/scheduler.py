import logging
from typing import Callable, Optional


class TimerHandle:
    """One-shot timer. Cancelling is allowed up to the moment it fires."""

    def __init__(self, key: str, delay: float):
        self.key = key
        self.delay = delay
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)


class RoundScheduler:
    """Runs round deadlines as Socket.IO background tasks.

    - No-ops in TESTING mode unless ENABLE_SCHEDULER_IN_TESTS is set
      (the handle is returned but never fires)
    - The worker checks the handle after sleeping, so a cancelled
      deadline never reaches its callback
    """

    def __init__(self, socketio, enabled: bool = True, logger: Optional[logging.Logger] = None):
        self.socketio = socketio
        self.enabled = enabled
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def for_app(cls, app, socketio):
        enabled = not app.config.get('TESTING') or bool(app.config.get('ENABLE_SCHEDULER_IN_TESTS'))
        return cls(socketio, enabled=enabled, logger=app.logger)

    def call_later(self, delay: float, callback: Callable[[], None], key: str = '') -> TimerHandle:
        handle = TimerHandle(key, delay)
        if not self.enabled:
            return handle
        self.logger.info(f"[timer-set] {key} delay={delay}s")

        def _worker():
            self.socketio.sleep(delay)
            if handle.cancelled:
                self.logger.info(f"[timer-abort] {key} cancelled")
                return
            handle.fired = True
            self.logger.info(f"[timer-fire] {key}")
            try:
                callback()
            except Exception:
                self.logger.exception(f"[timer-error] {key}")

        self.socketio.start_background_task(_worker)
        return handle
