class TournamentError(Exception):
    pass


class TournamentNotFoundError(TournamentError):
    pass


class TournamentClosedError(TournamentError):
    pass


class TournamentFullError(TournamentError):
    pass


class TournamentAlreadyRegisteredError(TournamentError):
    pass


class TournamentInsufficientXpError(TournamentError):
    def __init__(self, *, required_xp: int, current_xp: int) -> None:
        super().__init__(f"required_xp={required_xp} current_xp={current_xp}")
        self.required_xp = required_xp
        self.current_xp = current_xp
