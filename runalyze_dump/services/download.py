"""Download service: turns one activity into a FIT or TCX file on disk."""

import logging
import time
from pathlib import Path
from typing import Optional

from runalyze_dump.clients.base import BaseClient
from runalyze_dump.clients.exc import ExportUnavailable, NotFound, RunalyzeError
from runalyze_dump.config import Config
from runalyze_dump.models import (
    FILE_TYPE_FIT,
    FILE_TYPE_NONE,
    FILE_TYPE_TCX,
    ActivityInfo,
    DownloadResult,
)
from runalyze_dump.services.filesystem import FileSystem

logger = logging.getLogger(__name__)

FILE_MODE = 0o644


class DownloadService:
    """Downloads activities, preferring FIT and falling back to TCX.

    An activity whose FIT or TCX file is already in the save directory is
    never requested again. TCX is only tried when FIT is confirmed missing
    (404), not after other errors.
    """

    def __init__(
        self,
        client: BaseClient,
        fs: FileSystem,
        log: Optional[logging.Logger] = None,
        delay: Optional[float] = None,
    ):
        self.client = client
        self.fs = fs
        self.log = log or logger
        self.delay = Config.DOWNLOAD_DELAY if delay is None else delay

    def download_activity(self, activity: ActivityInfo, save_dir) -> DownloadResult:
        """Download a single activity and return a structured result."""
        fit_path = str(Path(save_dir) / f"{activity.id}.fit")
        tcx_path = str(Path(save_dir) / f"{activity.id}.tcx")

        # Skip if already exists
        for file_type, path in ((FILE_TYPE_FIT, fit_path), (FILE_TYPE_TCX, tcx_path)):
            if self.fs.exists(path):
                self.log.debug(f"Skipping {activity.id}, {path} already exists")
                return DownloadResult(
                    activity_id=activity.id,
                    success=True,
                    file_type=file_type,
                    file_path=path,
                    existed=True,
                )

        result = self._fetch_and_save(activity.id, fit_path, tcx_path)

        # Rate limiting
        if self.delay > 0:
            time.sleep(self.delay)

        return result

    def _fetch_and_save(self, activity_id: str, fit_path: str, tcx_path: str) -> DownloadResult:
        try:
            data, _ = self.client.get_fit(activity_id)
        except NotFound:
            self.log.debug(f"No FIT export for {activity_id}, trying TCX")
            return self._fetch_tcx(activity_id, tcx_path)
        except RunalyzeError as e:
            self.log.warning(f"Failed to download FIT file for activity {activity_id}: {e}")
            return DownloadResult(activity_id=activity_id, success=False, file_type=FILE_TYPE_FIT, error=e)

        return self._save(activity_id, FILE_TYPE_FIT, fit_path, data)

    def _fetch_tcx(self, activity_id: str, tcx_path: str) -> DownloadResult:
        try:
            data, _ = self.client.get_tcx(activity_id)
        except NotFound:
            self.log.info(f"Neither FIT nor TCX available for activity {activity_id}")
            return DownloadResult(
                activity_id=activity_id,
                success=False,
                file_type=FILE_TYPE_NONE,
                error=ExportUnavailable(activity_id),
            )
        except RunalyzeError as e:
            self.log.warning(f"Failed to download TCX file for activity {activity_id}: {e}")
            return DownloadResult(activity_id=activity_id, success=False, file_type=FILE_TYPE_TCX, error=e)

        return self._save(activity_id, FILE_TYPE_TCX, tcx_path, data)

    def _save(self, activity_id: str, file_type: str, path: str, data: bytes) -> DownloadResult:
        try:
            self.fs.write_file(path, data, FILE_MODE)
        except OSError as e:
            self.log.error(f"Failed to save {file_type.upper()} file for activity {activity_id}: {e}")
            return DownloadResult(activity_id=activity_id, success=False, file_type=file_type, error=e)

        self.log.info(f"Downloaded activity {activity_id} to {path}")
        return DownloadResult(activity_id=activity_id, success=True, file_type=file_type, file_path=path)
