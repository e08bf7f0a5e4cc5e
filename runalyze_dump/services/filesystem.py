"""File system access used by the download service."""

import os
from abc import ABC, abstractmethod
from pathlib import Path


class FileSystem(ABC):
    """The file operations the download service needs."""

    @abstractmethod
    def exists(self, path) -> bool:
        pass

    @abstractmethod
    def write_file(self, path, data: bytes, mode: int = 0o644) -> None:
        pass

    @abstractmethod
    def mkdir_all(self, path, mode: int = 0o755) -> None:
        pass


class OSFileSystem(FileSystem):
    """FileSystem backed by the operating system."""

    def exists(self, path) -> bool:
        return Path(path).exists()

    def write_file(self, path, data: bytes, mode: int = 0o644) -> None:
        path = Path(path)
        path.write_bytes(data)
        os.chmod(path, mode)

    def mkdir_all(self, path, mode: int = 0o755) -> None:
        Path(path).mkdir(mode=mode, parents=True, exist_ok=True)
