"""Cookie jar that keeps the Runalyze session on disk."""

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from requests.cookies import RequestsCookieJar, create_cookie

from runalyze_dump.clients.exc import CookieStoreError
from runalyze_dump.config import Config
from runalyze_dump.logger import TRACE

logger = logging.getLogger(__name__)

FILE_MODE = 0o600


def _rest_attr(cookie, name: str) -> Optional[Any]:
    """Case-insensitive lookup of a non-standard cookie attribute (HttpOnly, SameSite)."""
    for key, value in getattr(cookie, "_rest", {}).items():
        if key.lower() == name.lower():
            return value if value is not None else True
    return None


class PersistentCookieJar(RequestsCookieJar):
    """A RequestsCookieJar that saves itself after every cookie it receives.

    Cookies are stored as a JSON array at ``path``. Only cookies for the
    site domain are written.
    """

    def __init__(self, path, domain: str = Config.COOKIE_DOMAIN, policy=None):
        super().__init__(policy)
        self.path = Path(path).expanduser()
        self.domain = domain
        self._lock = threading.RLock()

    def _canonical_domain(self, domain: Optional[str]) -> str:
        # Runalyze emits some cookies without a domain; they belong to the site itself.
        return domain or self.domain

    def _belongs_to_site(self, cookie) -> bool:
        return cookie.domain.lstrip(".") == self.domain

    def set_cookie(self, cookie, *args, **kwargs):
        with self._lock:
            super().set_cookie(cookie, *args, **kwargs)
            self._autosave()

    def clear(self, domain=None, path=None, name=None):
        # Set-Cookie with a past expiry removes the cookie through clear()
        with self._lock:
            super().clear(domain, path, name)
            self._autosave()

    def _autosave(self) -> None:
        try:
            self.save()
        except OSError as e:
            # Cookies stay valid in memory for this run.
            logger.warning(f"Failed to save cookies to {self.path}: {e}")

    def load(self) -> int:
        """Load cookies from the file. A missing file is not an error.

        Returns the number of cookies loaded.
        """
        with self._lock:
            logger.debug(f"Loading cookies from: {self.path}")

            if not self.path.exists():
                logger.debug(f"Cookie file does not exist: {self.path}")
                return 0

            try:
                entries = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                raise CookieStoreError(f"failed to load cookies from {self.path}: {e}") from e

            if not isinstance(entries, list):
                raise CookieStoreError(f"cookie file {self.path} must contain a JSON array")

            for entry in entries:
                cookie = self._cookie_from_entry(entry)
                # Bypass our own set_cookie so loading does not rewrite the file
                RequestsCookieJar.set_cookie(self, cookie)
                logger.log(TRACE, f"  Cookie: {cookie.name}={cookie.value} (domain: {cookie.domain})")

            self.clear_expired_cookies()
            logger.debug(f"Loaded {len(entries)} cookie entries from file")
            return len(entries)

    def save(self) -> None:
        """Write the site's cookies to the file with owner-only permissions."""
        with self._lock:
            entries = self.entries()
            logger.log(TRACE, f"Saving {len(entries)} cookie entries to: {self.path}")

            self.path.parent.mkdir(parents=True, exist_ok=True)
            data = json.dumps(entries, indent=2)
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
            # O_CREAT only applies the mode to new files
            os.chmod(self.path, FILE_MODE)

    def entries(self) -> List[Dict[str, Any]]:
        """Serialisable form of the site's cookies."""
        with self._lock:
            return [self._entry_from_cookie(c) for c in list(self) if self._belongs_to_site(c)]

    def _cookie_from_entry(self, entry: Dict[str, Any]):
        rest = {}
        if entry.get("http_only"):
            rest["HttpOnly"] = None
        if entry.get("same_site"):
            rest["SameSite"] = entry["same_site"]

        expires = entry.get("expires")
        return create_cookie(
            name=entry["name"],
            value=entry.get("value", ""),
            domain=self._canonical_domain(entry.get("domain")),
            path=entry.get("path") or "/",
            expires=int(expires) if expires else None,
            secure=bool(entry.get("secure", False)),
            rest=rest,
        )

    @staticmethod
    def _entry_from_cookie(cookie) -> Dict[str, Any]:
        same_site = _rest_attr(cookie, "SameSite")
        return {
            "name": cookie.name,
            "value": cookie.value,
            "domain": cookie.domain,
            "path": cookie.path,
            "expires": cookie.expires,
            "secure": bool(cookie.secure),
            "http_only": _rest_attr(cookie, "HttpOnly") is not None,
            "same_site": same_site if isinstance(same_site, str) else None,
        }
