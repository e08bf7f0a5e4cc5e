"""Download run: authenticate, walk the weeks and download every activity."""

import logging
from datetime import date
from pathlib import Path
from typing import Optional

from runalyze_dump.clients.base import BaseClient
from runalyze_dump.clients.exc import RunalyzeError
from runalyze_dump.clients.runalyze import RunalyzeClient
from runalyze_dump.config import Settings
from runalyze_dump.dates import validate_and_parse_dates
from runalyze_dump.models import DownloadSummary
from runalyze_dump.services.auth import AuthService
from runalyze_dump.services.download import DownloadService
from runalyze_dump.services.filesystem import FileSystem, OSFileSystem
from runalyze_dump.services.iterator import ActivityIterator
from runalyze_dump.services.presentation import PresentationService

logger = logging.getLogger(__name__)

DIR_MODE = 0o755


class DownloadRunner:
    """Runs one download over an already validated date window."""

    def __init__(
        self,
        client: BaseClient,
        fs: FileSystem,
        presentation: PresentationService,
        log: Optional[logging.Logger] = None,
        download_service: Optional[DownloadService] = None,
    ):
        self.client = client
        self.fs = fs
        self.presentation = presentation
        self.log = log or logger
        self.auth_service = AuthService(client, self.log)
        self.download_service = download_service or DownloadService(client, fs, self.log)

    def run(self, since: date, until: date, save_dir) -> DownloadSummary:
        self.authenticate()
        save_dir = self.prepare_directory(save_dir)

        self.log.info(f"download configuration: since={since.isoformat()} until={until.isoformat()}")
        self.presentation.show_status(
            f"Downloading activities from {since.isoformat()} to {until.isoformat()}"
        )

        summary = DownloadSummary(since=since, until=until)
        current_week_start = None

        iterator = ActivityIterator(self.client, until, since, self.log)
        for activity in iterator:
            if activity.week_start != current_week_start:
                current_week_start = activity.week_start
                self.presentation.show_week_header(activity.week_start, activity.week_end)

            self.log.debug(f"processing activity {activity.id} type={activity.type!r}")
            result = self.download_service.download_activity(activity, save_dir)
            summary.add(result)
            self.presentation.show_activity_result(activity, result)

        if iterator.error is not None:
            self.log.warning(f"Stopped early while listing activities: {iterator.error}")

        self.presentation.show_final_results(summary)
        self.presentation.show_json_results(summary)
        self.log.info(f"download completed: processed={summary.processed} errors={summary.errors}")
        return summary

    def authenticate(self) -> None:
        self.presentation.show_progress("Verifying login credentials...")
        try:
            self.auth_service.ensure_authenticated()
        except RunalyzeError as e:
            self.presentation.show_error(e, "Failed to authenticate with Runalyze")
            raise
        self.presentation.show_status("Successfully authenticated with Runalyze")

    def prepare_directory(self, save_dir) -> Path:
        save_dir = Path(save_dir).expanduser()
        try:
            self.fs.mkdir_all(save_dir, DIR_MODE)
        except OSError as e:
            self.presentation.show_error(e, f"Failed to create save directory: {save_dir}")
            raise
        return save_dir


def download(
    settings: Settings,
    until_str: Optional[str] = None,
    since_str: Optional[str] = None,
    presentation: Optional[PresentationService] = None,
) -> DownloadSummary:
    """Validate the date window, then build the real client and run a download."""
    since, until = validate_and_parse_dates(until_str, since_str)

    if not settings.username or not settings.password:
        raise ValueError(
            "username and password must be provided via config file, environment variables, or command line flags"
        )

    presentation = presentation or PresentationService()
    logger.info(f"starting download process for {settings.username}")

    client = RunalyzeClient(settings.username, settings.password, settings.cookie_path)
    runner = DownloadRunner(client, OSFileSystem(), presentation)
    return runner.run(since, until, settings.save_dir)
