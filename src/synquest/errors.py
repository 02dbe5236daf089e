"""Errors raised by the quiz engine.

Every error is local to a single call: a rejected operation leaves the
session exactly as it was before the call.
"""


class QuizError(Exception):
    kind = "quiz_error"
    status_code = 400


class SessionNotFoundError(QuizError):
    kind = "session_not_found"
    status_code = 404

    def __init__(self, session_id: str):
        super().__init__(f"Quiz session {session_id} not found")
        self.session_id = session_id


class WordNotFoundError(QuizError):
    kind = "word_not_found"
    status_code = 404

    def __init__(self, word_id: str):
        super().__init__(f"Word {word_id} not found")
        self.word_id = word_id


class InsufficientWordsError(QuizError):
    kind = "insufficient_words"
    status_code = 422

    def __init__(self, requested: int, available: int):
        super().__init__(
            f"Requested {requested} questions but only {available} words match the settings"
        )
        self.requested = requested
        self.available = available


class OutOfOrderError(QuizError):
    kind = "out_of_order"
    status_code = 409

    def __init__(self, expected: str, received: str):
        super().__init__(f"Expected an answer for word {expected}, got {received}")
        self.expected = expected
        self.received = received


class SessionCompletedError(QuizError):
    kind = "session_completed"
    status_code = 409

    def __init__(self, session_id: str):
        super().__init__(f"Quiz session {session_id} is already completed")
        self.session_id = session_id


class HintsDisabledError(QuizError):
    kind = "hints_disabled"
    status_code = 400

    def __init__(self, session_id: str):
        super().__init__(f"Hints are disabled for quiz session {session_id}")
        self.session_id = session_id
