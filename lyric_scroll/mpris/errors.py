class MprisError(RuntimeError):
    pass


class NoPlayersFound(MprisError):
    pass


class PlayerUnavailable(MprisError):
    """The player went away or refused a call mid-session."""
