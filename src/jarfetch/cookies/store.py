"""On-disk persistence of the cookie jar document."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from ..errors import PersistenceError
from .jar import CookieJarDocument

logger = logging.getLogger(__name__)


class CookieStore:
    """Read and write the cookie jar document at a fixed path.

    Features:
    - Missing file is not an error: load() returns None
    - Invalid JSON or schema mismatch raises PersistenceError
    - Writes go to a temp file first and are moved into place atomically
    - Output is indented with 4 spaces for human inspection
    """

    INDENT = 4

    def __init__(self, path: Path):
        """Initialize the store.

        Args:
            path: Cookie file location
        """
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> Optional[CookieJarDocument]:
        """Load and validate the jar document.

        Returns:
            Parsed document, or None when the file does not exist

        Raises:
            PersistenceError: If the file cannot be read or is not a jar document
        """
        if not self.exists():
            return None

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise PersistenceError(self.path, f"not valid JSON: {e}") from e
        except OSError as e:
            raise PersistenceError(self.path, f"could not read cookie file: {e}") from e

        try:
            document = CookieJarDocument.model_validate(data)
        except ValidationError as e:
            raise PersistenceError(self.path, f"not a cookie jar document: {e}") from e

        logger.info(f"Loaded {len(document.cookies)} cookies from {self.path}")
        return document

    def save(self, document: dict[str, Any]) -> None:
        """Write the jar document, replacing any existing content.

        Args:
            document: Serialized jar (PersistentCookieJar.serialize())

        Raises:
            PersistenceError: If the file cannot be written
        """
        temp_path: Optional[str] = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=self.INDENT, ensure_ascii=False)
                f.write("\n")
            os.replace(temp_path, self.path)
            temp_path = None
        except OSError as e:
            raise PersistenceError(self.path, f"could not write cookie file: {e}") from e
        finally:
            if temp_path is not None and os.path.exists(temp_path):
                os.unlink(temp_path)

        logger.debug(f"Saved {len(document.get('cookies', []))} cookies to {self.path}")
