class GameSessionError(Exception):
    pass


class QuizNotFoundError(GameSessionError):
    pass


class UserNotFoundError(GameSessionError):
    pass


class SessionNotFoundError(GameSessionError):
    pass


class SessionOwnershipError(GameSessionError):
    pass


class SessionFinishedError(GameSessionError):
    pass


class WrongQuestionIndexError(GameSessionError):
    def __init__(self, *, expected: int, received: int) -> None:
        super().__init__(f"expected={expected} received={received}")
        self.expected = expected
        self.received = received


class QuestionNotFoundError(GameSessionError):
    pass


class InvalidAnswerOptionError(GameSessionError):
    pass


class QuestionNotStartedError(GameSessionError):
    pass


class AnswerTimeoutError(GameSessionError):
    pass


class AlreadyAnsweredError(GameSessionError):
    pass
