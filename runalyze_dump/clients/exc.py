"""Errors raised by the Runalyze client."""

from typing import Optional


class RunalyzeError(Exception):
    """Base class for Runalyze client errors."""


class RequestFailed(RunalyzeError):
    """The HTTP request could not be sent or its response not read."""


class TokenNotFound(RunalyzeError):
    """The login page did not contain a CSRF token."""


class LoginFailed(RunalyzeError):
    """The login POST was not answered with a redirect."""

    def __init__(self, status_code: int):
        super().__init__(f"login failed: unexpected status code: {status_code}")
        self.status_code = status_code


class RedirectedToLogin(RunalyzeError):
    """An authenticated endpoint redirected to the login page (session expired)."""

    def __init__(self, location: Optional[str] = None):
        super().__init__("redirected to login page")
        self.location = location


class UnexpectedStatus(RunalyzeError):
    """A response carried a status code the caller did not expect."""

    def __init__(self, status_code: int, url: Optional[str] = None):
        super().__init__(f"unexpected status code: {status_code}")
        self.status_code = status_code
        self.url = url


class NotFound(UnexpectedStatus):
    """The requested resource does not exist (HTTP 404)."""

    def __init__(self, url: Optional[str] = None):
        super().__init__(404, url)


class FilenameMissing(RunalyzeError):
    """The export response had no usable content-disposition filename."""


class ExportUnavailable(RunalyzeError):
    """Neither FIT nor TCX export exists for an activity."""

    def __init__(self, activity_id: str):
        super().__init__(f"neither FIT nor TCX available for activity {activity_id}")
        self.activity_id = activity_id


class CookieStoreError(RunalyzeError):
    """The cookie file exists but cannot be read."""
