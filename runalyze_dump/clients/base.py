"""Base client interface for the Runalyze site."""

from abc import ABC, abstractmethod
from datetime import date
from typing import Tuple


class BaseClient(ABC):
    """Abstract base class for the capabilities the services rely on."""

    @abstractmethod
    def login(self) -> None:
        """Authenticate with the site using the configured credentials."""
        pass

    @abstractmethod
    def get_data_browser(self, week_start: date) -> str:
        """Get the data browser HTML for the week starting at week_start."""
        pass

    @abstractmethod
    def get_fit(self, activity_id: str) -> Tuple[bytes, str]:
        """Download the FIT export of an activity."""
        pass

    @abstractmethod
    def get_tcx(self, activity_id: str) -> Tuple[bytes, str]:
        """Download the TCX export of an activity."""
        pass

    @abstractmethod
    def persist_cookies(self) -> None:
        """Write the current session to durable storage."""
        pass
