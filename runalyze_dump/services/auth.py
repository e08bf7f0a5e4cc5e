"""Session verification and login."""

import logging
from datetime import date
from typing import Optional

from runalyze_dump.clients.base import BaseClient
from runalyze_dump.clients.exc import RedirectedToLogin

logger = logging.getLogger(__name__)

STATE_UNVERIFIED = "unverified"
STATE_VERIFIED = "verified"


class AuthService:
    """Makes sure the client holds a working session before it is used."""

    def __init__(self, client: BaseClient, log: Optional[logging.Logger] = None):
        self.client = client
        self.log = log or logger
        self.state = STATE_UNVERIFIED

    @property
    def verified(self) -> bool:
        return self.state == STATE_VERIFIED

    def ensure_authenticated(self) -> None:
        """Probe the session; on a login redirect, log in once and probe again.

        Any other failure, and any failure after logging in, is raised.
        """
        if self.verified:
            return

        self.log.debug("attempting to verify login")
        try:
            self._probe()
        except RedirectedToLogin:
            self.log.info("session expired, attempting login")
            self.client.login()
            self._probe()
            self._persist()
            self.state = STATE_VERIFIED
            self.log.info("successfully logged in to Runalyze")
            return

        self._persist()
        self.state = STATE_VERIFIED
        self.log.info("using existing Runalyze session")

    def _probe(self) -> None:
        self.client.get_data_browser(date.today())

    def _persist(self) -> None:
        try:
            self.client.persist_cookies()
        except OSError as e:
            self.log.warning(f"failed to persist cookies: {e}")
