"""User-facing output for the download command."""

import json
import logging
from datetime import date

import click

from runalyze_dump.models import FILE_TYPE_NONE, ActivityInfo, DownloadResult, DownloadSummary

logger = logging.getLogger(__name__)


class PresentationService:
    """Prints progress and results; in JSON mode only the final JSON document is printed."""

    def __init__(self, json_mode: bool = False):
        self.json_mode = json_mode

    def _echo(self, message: str, err: bool = False, **style):
        if self.json_mode:
            return
        click.echo(click.style(message, **style) if style else message, err=err)

    def show_progress(self, message: str):
        self._echo(f"… {message}", dim=True)

    def show_status(self, message: str):
        self._echo(f"✓ {message}", fg="green")

    def show_error(self, error: Exception, message: str):
        logger.error(f"{message}: {error}")
        self._echo(f"Error: {message}: {error}", err=True, fg="red")

    def show_week_header(self, week_start: date, week_end: date):
        self._echo(f"\nWeek {week_start.isoformat()} – {week_end.isoformat()}", bold=True)

    def show_activity_result(self, activity: ActivityInfo, result: DownloadResult):
        details = []
        if activity.date:
            details.append(activity.date)
        if activity.distance_km:
            details.append(f"{activity.distance_km:.1f} km")
        label = f"{activity.type_emoji} {activity.id}"
        if details:
            label += f" ({', '.join(details)})"

        if result.existed:
            self._echo(f"  {label}  {result.file_type.upper()} exists", dim=True)
        elif result.success:
            self._echo(f"  {label}  {result.file_type.upper()} downloaded", fg="green")
        elif result.file_type == FILE_TYPE_NONE:
            self._echo(f"  {label}  FIT/TCX not available", fg="yellow")
        else:
            self._echo(f"  {label}  {result.file_type.upper()} error: {result.error}", fg="red")

    def show_final_results(self, summary: DownloadSummary):
        self._echo(
            f"\nDownload complete: {summary.processed} processed, {summary.errors} errors"
        )
        self._echo(f"  Downloaded: {summary.downloaded}")
        self._echo(f"  Skipped (already exists): {summary.existed}")
        self._echo(f"  Not available: {summary.unavailable}")

    def show_json_results(self, summary: DownloadSummary):
        if self.json_mode:
            click.echo(json.dumps(summary.to_dict()))
