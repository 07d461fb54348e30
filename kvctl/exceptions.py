"""
kvctl exception hierarchy.

All custom exceptions live here to avoid circular imports.
"""


class CliError(Exception):
    """Exit code 1 — validation, not-found, network, parse errors."""

    exit_code = 1


class SetupError(CliError):
    """Exit code 2 — no credentials, no project file."""

    exit_code = 2


class ConfigurationError(SetupError):
    """Required project fields are missing or malformed."""

    def __init__(self, message, missing_fields=()):
        super().__init__(message)
        self.missing_fields = tuple(missing_fields)


class DuplicateBindingError(CliError):
    """Two namespace entries in one target share a binding name."""

    def __init__(self, binding, target_name):
        super().__init__(
            f'[ERROR] Namespace binding "{binding}" is duplicated in "{target_name}"'
        )
        self.binding = binding
        self.target_name = target_name


class BindingNotFoundError(CliError):
    """No namespace entry matches the requested binding name."""

    def __init__(self, binding, target_name):
        super().__init__(f'[ERROR] Namespace binding "{binding}" not found in "{target_name}"')
        self.binding = binding
        self.target_name = target_name


class UserInputError(CliError):
    """Malformed answer to an interactive prompt."""


class RemoteError(CliError):
    """A remote call failed. ``failure`` is an ApiFailure or TransportFailure."""

    def __init__(self, failure):
        super().__init__(str(failure))
        self.failure = failure


class HTTPError(Exception):
    """Raised by _http_request for HTTP errors that callers want to handle."""

    def __init__(self, code, reason, body, headers=None):
        self.code = code
        self.reason = reason
        self.body = body
        self.headers = headers or {}
