"""Image storage for uploaded category images."""

import secrets
import shutil
from pathlib import Path
from logger import get_logger

logger = get_logger()

CATEGORY_IMAGES_FOLDER = "service-categories"


class ImageStorage:
    """Copies uploaded images into the uploads directory.

    Stored files get a random 32-character hex name that keeps the original
    extension. Callers receive a public path such as
    ``/uploads/service-categories/<name>.png`` and treat it as opaque.

    Args:
        uploads_dir: Root directory for uploaded files.
        url_prefix: Public prefix that maps onto uploads_dir.
    """

    def __init__(self, uploads_dir: Path, url_prefix: str = "/uploads"):
        self.uploads_dir = Path(uploads_dir)
        self.url_prefix = url_prefix.rstrip("/")

    def store(self, source_path: Path, folder: str = CATEGORY_IMAGES_FOLDER) -> str:
        """Copy a file into storage.

        Args:
            source_path: File to store.
            folder: Subfolder under the uploads directory.

        Returns:
            Public path of the stored file.

        Raises:
            FileNotFoundError: If source_path does not exist.
        """
        source_path = Path(source_path)
        if not source_path.is_file():
            raise FileNotFoundError(f"Image file not found: {source_path}")

        target_dir = self.uploads_dir / folder
        target_dir.mkdir(parents=True, exist_ok=True)

        filename = f"{secrets.token_hex(16)}{source_path.suffix}"
        shutil.copyfile(source_path, target_dir / filename)

        public_path = f"{self.url_prefix}/{folder}/{filename}"
        logger.info(f"Stored image {source_path.name} as {public_path}")
        return public_path

    def resolve(self, public_path: str) -> Path:
        """Map a public path returned by store() back to a file location.

        Raises:
            ValueError: If the path is not under the configured prefix.
        """
        prefix = f"{self.url_prefix}/"
        if not public_path.startswith(prefix):
            raise ValueError(f"Not an uploaded file path: {public_path}")

        path = (self.uploads_dir / public_path[len(prefix):]).resolve()
        if not path.is_relative_to(self.uploads_dir.resolve()):
            raise ValueError(f"Not an uploaded file path: {public_path}")
        return path
