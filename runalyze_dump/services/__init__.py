from runalyze_dump.services.auth import AuthService
from runalyze_dump.services.download import DownloadService
from runalyze_dump.services.iterator import ActivityIterator
from runalyze_dump.services.runner import DownloadRunner

__all__ = ['ActivityIterator', 'AuthService', 'DownloadRunner', 'DownloadService']
