"""Runalyze website client.

Runalyze has no public export API, so this client drives the same endpoints
the browser does: a form login guarded by a CSRF token, the AJAX data browser
that renders one week of activities as HTML, and the per-activity file export.
Redirects are never followed; callers inspect them instead.
"""

import logging
import re
from datetime import date, datetime, time, timedelta, timezone
from pathlib import Path
from typing import Optional, Tuple, Union

import requests

from runalyze_dump.clients.base import BaseClient
from runalyze_dump.clients.cookie_jar import PersistentCookieJar
from runalyze_dump.clients.exc import (
    FilenameMissing,
    LoginFailed,
    NotFound,
    RedirectedToLogin,
    RequestFailed,
    TokenNotFound,
    UnexpectedStatus,
)
from runalyze_dump.config import Config
from runalyze_dump.logger import TRACE

logger = logging.getLogger(__name__)

COMMON_HEADERS = {
    "accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8,application/signed-exchange;v=b3;q=0.7",
    "accept-language": "en-GB,en;q=0.9,nb-NO;q=0.8,nb;q=0.7,sv-SE;q=0.6,sv;q=0.5,en-US;q=0.4",
    "sec-ch-ua": "\"Google Chrome\";v=\"137\", \"Chromium\";v=\"137\", \"Not/A)Brand\";v=\"24\"",
    "sec-ch-ua-mobile": "?0",
    "sec-ch-ua-platform": "\"macOS\"",
    "sec-fetch-dest": "document",
    "sec-fetch-mode": "navigate",
    "sec-fetch-site": "same-origin",
    "sec-fetch-user": "?1",
    "upgrade-insecure-requests": "1",
}

EXPORT_FORMATS = ("fit", "tcx")

CSRF_TOKEN_RE = re.compile(r'name="_csrf_token" value="([^"]+)"')
FILENAME_RE = re.compile(r'filename="([^"]+)"')

BODY_PREVIEW_LENGTH = 512


def week_bounds(week_start: Union[date, datetime]) -> Tuple[int, int]:
    """Epoch seconds for week_start and for 23:59:59 UTC on the Sunday of its week."""
    if isinstance(week_start, datetime):
        start = week_start if week_start.tzinfo else week_start.replace(tzinfo=timezone.utc)
    else:
        start = datetime.combine(week_start, time.min, tzinfo=timezone.utc)

    sunday = start.date() + timedelta(days=6 - start.weekday())
    end = datetime.combine(sunday, time(23, 59, 59), tzinfo=timezone.utc)
    return int(start.timestamp()), int(end.timestamp())


class RunalyzeClient(BaseClient):
    """Client for runalyze.com with a session persisted to a cookie file."""

    def __init__(self, username: str, password: str, cookie_path=None, base_url: str = Config.BASE_URL):
        super().__init__()
        self.base_url = base_url.rstrip("/")
        self.username = username
        self.password = password
        self.cookie_path = Path(cookie_path or Config.DEFAULT_COOKIE_PATH).expanduser()

        self.cookie_jar = PersistentCookieJar(self.cookie_path)
        self.cookie_jar.load()

        self.session = requests.Session()
        self.session.cookies = self.cookie_jar

    def _request(self, method: str, path: str, headers: Optional[dict] = None, **kwargs) -> requests.Response:
        """Send one request; every call to the site goes through here."""
        url = f"{self.base_url}{path}"
        request_headers = dict(COMMON_HEADERS)
        request_headers.update(headers or {})

        logger.debug(f"Request: {method} {url}")
        if logger.isEnabledFor(TRACE):
            logger.log(TRACE, "Request Headers:")
            for key, value in request_headers.items():
                logger.log(TRACE, f"  {key}: {value}")
            if kwargs.get("data"):
                logger.log(TRACE, f"Request Body: {kwargs['data']}")

        try:
            response = self.session.request(
                method,
                url,
                headers=request_headers,
                allow_redirects=False,
                timeout=Config.REQUEST_TIMEOUT,
                **kwargs,
            )
        except requests.RequestException as e:
            raise RequestFailed(f"failed to send request: {e}") from e

        logger.debug(f"Response: {response.status_code} {url}")
        if logger.isEnabledFor(TRACE):
            logger.log(TRACE, "Response Headers:")
            for key, value in response.headers.items():
                logger.log(TRACE, f"  {key}: {value}")
            if response.content:
                preview = response.content[:BODY_PREVIEW_LENGTH].decode("utf-8", errors="replace")
                logger.log(TRACE, f"Response Body Preview: {preview}")

        return response

    def login(self) -> None:
        """Log in with the CSRF token scraped from the login page."""
        csrf_token = self._get_login_token()

        data = {
            "_username": self.username,
            "_password": self.password,
            "_remember_me": "on",
            "submit": "Sign in",
            "_csrf_token": csrf_token,
        }
        response = self._request(
            "POST",
            "/login",
            headers={
                "content-type": "application/x-www-form-urlencoded",
                "cache-control": "max-age=0",
            },
            data=data,
        )

        if response.status_code != 302:
            raise LoginFailed(response.status_code)

        logger.info(f"Successfully logged in as {self.username}")

    def _get_login_token(self) -> str:
        response = self._request("GET", "/login")
        if response.status_code != 200:
            raise UnexpectedStatus(response.status_code, response.url)

        match = CSRF_TOKEN_RE.search(response.text)
        if not match:
            raise TokenNotFound("csrf token not found in response")
        return match.group(1)

    def get_data_browser(self, week_start: Union[date, datetime]) -> str:
        """Get the data browser HTML for the week containing week_start."""
        start, end = week_bounds(week_start)
        response = self._request(
            "GET",
            "/databrowser",
            headers={
                "x-requested-with": "XMLHttpRequest",
                "accept": "text/html, */*; q=0.01",
                "sec-fetch-dest": "empty",
                "sec-fetch-mode": "cors",
            },
            params={"start": start, "end": end},
        )

        if response.status_code == 302:
            location = response.headers.get("Location", "")
            if location.endswith("/login"):
                raise RedirectedToLogin(location)

        if not 200 <= response.status_code < 300:
            raise UnexpectedStatus(response.status_code, response.url)

        return response.text

    def get_export(self, activity_id: str, file_format: str) -> Tuple[bytes, str]:
        """Download an activity export; returns the file content and the server's filename."""
        file_format = file_format.lower()
        if file_format not in EXPORT_FORMATS:
            raise ValueError(f"Unsupported format: {file_format}")

        response = self._request(
            "GET",
            f"/activity/{activity_id}/export/file/{file_format}",
            headers={"referer": f"{self.base_url}/dashboard"},
        )

        if response.status_code == 404:
            raise NotFound(response.url)
        if response.status_code != 200:
            raise UnexpectedStatus(response.status_code, response.url)

        content_disposition = response.headers.get("content-disposition")
        if not content_disposition:
            raise FilenameMissing("content-disposition header not found")

        match = FILENAME_RE.search(content_disposition)
        if not match:
            raise FilenameMissing("filename not found in content-disposition header")

        return response.content, match.group(1)

    def get_fit(self, activity_id: str) -> Tuple[bytes, str]:
        return self.get_export(activity_id, "fit")

    def get_tcx(self, activity_id: str) -> Tuple[bytes, str]:
        return self.get_export(activity_id, "tcx")

    def persist_cookies(self) -> None:
        self.cookie_jar.save()
