"""Exception hierarchy for rootly-tui.

All exceptions inherit from :class:`RootlyTuiError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`rootly_tui.exit_codes`. The entry point in :func:`rootly_tui.app.main`
catches ``RootlyTuiError`` and exits with the matching code.

Only remote-fetch errors are meant to reach the user: the cache layer absorbs
its own failures and reports them as misses.

Subclass hierarchy::

    RootlyTuiError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- AuthError           (exit 3)
    +-- NotFoundError       (exit 4)
    +-- ServerError         (exit 5)
    +-- ConnectionError_    (exit 6)
    +-- DecodeError         (exit 7)
    +-- ConfigError         (exit 1)
"""

from rootly_tui.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_DECODE_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
)


class RootlyTuiError(Exception):
    """Base exception for all rootly-tui errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(RootlyTuiError):
    """Raised for invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


class AuthError(RootlyTuiError):
    """Raised when the API rejects the configured key (HTTP 401/403)."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(RootlyTuiError):
    """Raised when the API returns HTTP 404."""

    exit_code = EXIT_NOT_FOUND


class ServerError(RootlyTuiError):
    """Raised for any other non-success HTTP status."""

    exit_code = EXIT_SERVER_ERROR


class ConnectionError_(RootlyTuiError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class DecodeError(RootlyTuiError):
    """Raised when a response body is not the JSON:API shape we expect."""

    exit_code = EXIT_DECODE_ERROR


class ConfigError(RootlyTuiError):
    """Raised for configuration problems (missing API key, invalid JSON)."""

    exit_code = EXIT_GENERIC_FAILURE
