import os
import time
import uuid
import shutil
import logging
from typing import Iterable, Optional

from werkzeug.utils import secure_filename

from utils.security import normalize_windows_path, validate_file_path


class ScratchStorage:
    """
    Transient file staging for the relay.
    - upload_dir: where POST /upload writes incoming videos.
    - staging_dir: where a per-request copy is placed before it is sent to Gemini.
    Neither directory is expected to survive a restart.
    """

    def __init__(self, upload_dir: str, staging_dir: str) -> None:
        self.upload_dir = upload_dir
        self.staging_dir = staging_dir

    def _ensure_dir(self, path: str) -> None:
        os.makedirs(path, exist_ok=True)

    def save_upload(self, file_storage) -> str:
        """
        Persist a werkzeug FileStorage as <epoch ms>-<filename> and return its path.
        Filesystem errors propagate to the caller.
        """
        self._ensure_dir(self.upload_dir)
        filename = self._safe_name(file_storage.filename or "")
        stored_name = f"{int(time.time() * 1000)}-{filename}"
        path = os.path.join(self.upload_dir, stored_name)
        file_storage.save(path)
        logging.info(f"Saved upload to {path}")
        return normalize_windows_path(path)

    def _safe_name(self, original: str) -> str:
        """secure_filename, keeping the extension when non-ASCII names are stripped away."""
        filename = secure_filename(original)
        ext = secure_filename(os.path.splitext(original)[1])
        ext = f".{ext}" if ext else ""
        if not filename or (ext and not filename.endswith(ext)):
            return f"video{ext or '.mp4'}"
        return filename

    def is_upload_path(self, path: str) -> bool:
        return validate_file_path(path, [self.upload_dir])

    def stage_copy(self, uploaded_path: str, suffix: str = ".mp4") -> str:
        """Copy an upload into the staging directory under a per-request unique name."""
        self._ensure_dir(self.staging_dir)
        target_path = os.path.join(self.staging_dir, f"vid-{uuid.uuid4().hex}{suffix}")
        shutil.copyfile(uploaded_path, target_path)
        logging.info(f"Copied video to: {target_path}")
        return target_path

    def cleanup(self, *paths: Optional[str]) -> None:
        """Best-effort removal; failures are logged, never raised."""
        for path in paths:
            if not path:
                continue
            try:
                os.remove(path)
                logging.debug(f"Removed scratch file: {path}")
            except OSError as e:
                logging.warning(f"Cleanup warning for {path}: {e}")

    def purge_older_than(self, max_age_hours: float) -> int:
        """Delete scratch files older than max_age_hours. Returns the number removed."""
        cutoff = time.time() - max_age_hours * 3600
        removed = 0
        for directory in self._scratch_dirs():
            if not os.path.isdir(directory):
                continue
            for entry in os.scandir(directory):
                if not entry.is_file():
                    continue
                try:
                    if entry.stat().st_mtime < cutoff:
                        os.remove(entry.path)
                        removed += 1
                except OSError as e:
                    logging.warning(f"Could not purge {entry.path}: {e}")
        logging.info(f"Purged {removed} scratch files older than {max_age_hours}h")
        return removed

    def _scratch_dirs(self) -> Iterable[str]:
        return (self.upload_dir, self.staging_dir)
