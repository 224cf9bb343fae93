from __future__ import annotations

from .sessions_finish import finish_quiz_session
from .sessions_start import start_quiz_session
from .sessions_submit import record_timeout, submit_answer
from .sessions_view import signal_question_view

__all__ = [
    "finish_quiz_session",
    "record_timeout",
    "signal_question_view",
    "start_quiz_session",
    "submit_answer",
]
