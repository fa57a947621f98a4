"""
Saves downloaded payloads to a local directory
"""

from pathlib import Path, PurePosixPath, PureWindowsPath

from core.logging_config import get_logger


class DownloadWriter:
    """Writes completed downloads into a directory without overwriting existing files"""

    def __init__(self, download_dir: str = "./downloads"):
        self.logger = get_logger(__name__)
        self.download_dir = Path(download_dir)
        self.save_count = 0

    def __call__(self, data: bytes, path: str) -> Path:
        return self.save(data, path)

    def save(self, data: bytes, path: str) -> Path:
        """
        Save data under the final component of the announced path.

        Returns:
            Path of the written file
        """
        self.download_dir.mkdir(parents=True, exist_ok=True)

        target = self._unique_target(self._safe_name(path))
        with open(target, "wb") as f:
            f.write(data)

        self.save_count += 1
        self.logger.info(f"Saved download: {target}", extra={
            "extra_data": {"path": path, "size": len(data), "target": str(target)}
        })
        return target

    @staticmethod
    def _safe_name(path: str) -> str:
        # Accept both separators; only the last component is kept
        name = PureWindowsPath(PurePosixPath(path).name).name
        if name in ("", ".", ".."):
            return "download"
        return name

    def _unique_target(self, name: str) -> Path:
        target = self.download_dir / name
        if not target.exists():
            return target

        stem, suffix = Path(name).stem, Path(name).suffix
        counter = 1
        while True:
            candidate = self.download_dir / f"{stem} ({counter}){suffix}"
            if not candidate.exists():
                return candidate
            counter += 1
