"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~rootly_tui.exceptions.RootlyTuiError` subclass.

Example::

    $ rootly-tui incidents
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the API key was rejected
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_AUTH_FAILURE = 3
"""The API key was rejected (HTTP 401/403)."""

EXIT_NOT_FOUND = 4
"""The requested incident or alert was not found (HTTP 404)."""

EXIT_SERVER_ERROR = 5
"""The API returned a non-success status other than 401/403/404."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_DECODE_ERROR = 7
"""The API response could not be decoded into incident or alert records."""
