class BotError(Exception):
    """Base class for failures surfaced to the chat room or at startup.

    Subclasses wrap one external failure source. The underlying library
    exception is kept as ``__cause__`` (``raise ... from exc``).
    """

    kind = "Error"

    def describe(self) -> str:
        detail = str(self)
        cause = self.__cause__
        if cause is not None and str(cause) and str(cause) not in detail:
            detail = f"{detail}: {cause}" if detail else str(cause)
        return f"{self.kind}: {detail}" if detail else self.kind


class AuthError(BotError):
    kind = "AuthError"


class StoreError(BotError):
    kind = "StoreError"


class RemoteApiError(BotError):
    kind = "RemoteApiError"


class TransportError(BotError):
    kind = "TransportError"


class ConfigError(BotError):
    kind = "ConfigError"


def render_error(exc: BaseException) -> str:
    """Render an exception as the text sent back into a room."""
    if isinstance(exc, BotError):
        return f"Error: {exc.describe()}"
    return f"Error: {type(exc).__name__}: {exc}"
