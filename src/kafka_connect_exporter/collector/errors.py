"""Errors raised by the Kafka Connect REST client.

Each one carries an HTTP-style status code so the collector can log
upstream failures uniformly. Transport and decode failures have no
real status of their own and report 500.
"""

from __future__ import annotations

from http import HTTPStatus


class ConnectAPIError(Exception):

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    def __str__(self) -> str:
        return self.message


class TransportError(ConnectAPIError):
    """The host could not be reached (connect failure, timeout, reset)."""

    def __init__(self, message: str):
        super().__init__(int(HTTPStatus.INTERNAL_SERVER_ERROR), message)


class UpstreamError(ConnectAPIError):
    """The host answered with something other than 200."""


class DecodeError(ConnectAPIError):
    """A 200 response whose body isn't the JSON shape we expect."""

    def __init__(self, message: str):
        super().__init__(int(HTTPStatus.INTERNAL_SERVER_ERROR), message)
