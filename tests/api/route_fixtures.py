from __future__ import annotations

from types import SimpleNamespace


class _Transaction:
    def __init__(self, session: object) -> None:
        self._session = session

    async def __aenter__(self) -> object:
        return self._session

    async def __aexit__(self, exc_type, exc, tb) -> bool:  # noqa: ANN001
        return False


class FakeSessionLocal:
    def __init__(self) -> None:
        self.session = object()
        self.begin_calls = 0

    def begin(self) -> _Transaction:
        self.begin_calls += 1
        return _Transaction(self.session)


def player(user_id: int = 1) -> SimpleNamespace:
    return SimpleNamespace(id=user_id, telegram_user_id=9000 + user_id)
