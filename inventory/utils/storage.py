import logging
import re
import secrets
import time
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Optional, Union

from inventory.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

ALLOWED_MIME_TYPES = frozenset({
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "application/pdf",
    "text/plain",
    "text/csv",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
})

IMAGES = "images"
DOCUMENTS = "documents"
URL_PREFIX = "/uploads"

_UPLOAD_PATH = re.compile(rf"^{URL_PREFIX}/(?:{IMAGES}|{DOCUMENTS})/([^/?#]+)$")


@dataclass
class StoredFile:
    filename: str
    partition: str
    size: int

    @property
    def url(self) -> str:
        return f"{URL_PREFIX}/{self.partition}/{self.filename}"


def partition_for(mimetype: str) -> str:
    """Images and everything else are stored apart."""
    return IMAGES if mimetype.startswith("image/") else DOCUMENTS


def sanitize_filename(original_name: str) -> str:
    """
    Build a collision-resistant name from the client's filename.

    Non-alphanumerics in the stem become ``_``, the stem is cut to 50
    characters, and a millisecond timestamp plus random hex is appended.
    """
    path = PurePosixPath(original_name.replace("\\", "/"))
    ext = path.suffix
    stem = re.sub(r"[^a-zA-Z0-9]", "_", path.name[: len(path.name) - len(ext)])[:50]
    unique_suffix = f"{int(time.time() * 1000)}-{secrets.token_hex(6)}"
    return f"{stem}_{unique_suffix}{ext}"


def filename_from_url(url: Optional[str], origin: Optional[str] = None) -> Optional[str]:
    """
    Stored filename behind an upload URL, else None.

    Only server-relative ``/uploads/<partition>/<name>`` paths count, plus
    absolute URLs on ``origin`` when one is given.
    """
    if not url:
        return None
    if origin:
        origin = origin.rstrip("/")
        if url.startswith(f"{origin}/"):
            url = url[len(origin):]
    match = _UPLOAD_PATH.match(url)
    return match.group(1) if match else None


class FileStorage:
    """
    Disk storage for uploaded files.

    Files live under ``<root>/images`` or ``<root>/documents`` and are
    served back statically under ``/uploads``.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def ensure_dirs(self) -> None:
        for partition in (IMAGES, DOCUMENTS):
            directory = self.root / partition
            if not directory.exists():
                directory.mkdir(parents=True, exist_ok=True)
                logger.info(f"Created directory: {directory}")

    def save(self, content: bytes, original_name: str, mimetype: str) -> StoredFile:
        """Write ``content`` to its partition under a sanitized name."""
        self.ensure_dirs()
        stored = StoredFile(
            filename=sanitize_filename(original_name or "file"),
            partition=partition_for(mimetype),
            size=len(content),
        )
        (self.root / stored.partition / stored.filename).write_bytes(content)
        logger.info(f"File uploaded: {original_name} -> {stored.filename}")
        return stored

    def delete(self, filename: str) -> bool:
        """
        Remove ``filename`` from whichever partition holds it.

        A missing file is not an error, so repeated calls are safe.
        Failures are logged and reported as False rather than raised.

        Returns:
            True unless removing an existing file failed.
        """
        if not filename or PurePosixPath(filename).name != filename or "\\" in filename:
            logger.warning(f"Refusing to delete suspicious filename: {filename!r}")
            return False

        ok = True
        for partition in (IMAGES, DOCUMENTS):
            path = self.root / partition / filename
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.error(f"Failed to delete file: {path}: {e}")
                ok = False
            else:
                logger.debug(f"Deleted file if present: {path}")
        return ok


storage = FileStorage(settings.UPLOAD_DIR)


def get_storage() -> FileStorage:
    """Dependency returning the configured upload storage."""
    return storage
