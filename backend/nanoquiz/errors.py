"""Error taxonomy for quiz sessions.

Services raise these; the Socket.IO handlers are the only place they are
caught. ``message`` is safe to show to the caller.
"""


class QuizError(Exception):
    default_message = 'Request failed.'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(QuizError):
    default_message = 'Invalid quiz JSON format.'


class CapacityError(QuizError):
    default_message = 'Too many games running. Try again later.'


class AuthorizationError(QuizError):
    default_message = 'Only the host may do that.'


class StateError(QuizError):
    default_message = 'Not allowed right now.'


class NotFoundError(QuizError):
    default_message = 'Game not found or already started'


class RateLimitError(QuizError):
    default_message = 'Rate limit exceeded'
