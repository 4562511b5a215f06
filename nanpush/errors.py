class NanpushError(Exception):
    """Base class for every error that ends the push loop."""


class ConfigError(NanpushError):
    pass


class EncodeError(NanpushError):
    pass


class StoreError(NanpushError):
    """A remote write was not accepted.

    `recoverable` is set for connection problems and 5xx responses, the
    cases a remote-write sender would normally retry. Nothing here retries;
    the flag is only reported.
    """

    def __init__(self, message, recoverable=False):
        super().__init__(message)
        self.recoverable = recoverable
