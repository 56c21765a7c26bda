from __future__ import annotations


class BotError(Exception):
    """Base class for errors raised by the bot's own layers."""


class ConfigurationError(BotError):
    """A required setting or credential is missing. Raised before any I/O."""


class UpstreamError(BotError):
    """Transport failure talking to a remote API: every host failed, bad status or broken JSON."""


class SignumApiError(BotError):
    """The node answered but embedded an error in the payload of a read call."""


class TransactionError(BotError):
    prefix = "bad create transaction request"

    def __init__(self, reason: object) -> None:
        self.reason = str(reason)
        super().__init__(f"{self.prefix}: {self.reason}")
