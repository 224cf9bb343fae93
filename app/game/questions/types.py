from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class OptionContent:
    option_id: int
    text: str
    is_correct: bool


@dataclass(slots=True, frozen=True)
class QuestionContent:
    question_id: int
    order: int
    text: str
    difficulty: str
    time_limit_seconds: int
    options: tuple[OptionContent, ...]

    @property
    def time_limit_ms(self) -> int:
        return self.time_limit_seconds * 1000

    def option(self, option_id: int) -> OptionContent | None:
        for option in self.options:
            if option.option_id == option_id:
                return option
        return None


@dataclass(slots=True, frozen=True)
class QuizContent:
    quiz_id: int
    title: str
    questions: tuple[QuestionContent, ...]

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    def question_at(self, index: int) -> QuestionContent | None:
        if 0 <= index < len(self.questions):
            return self.questions[index]
        return None
