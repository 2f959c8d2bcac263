"""
MDLive Content Source.

Reads watched files from disk on demand.
Requires Python 3.11+.
"""

from importlib import resources
from pathlib import Path

from utils.errors import ContentReadError


class ContentSource:
    """
    Reads whole files as text.

    Nothing is cached: every call goes back to disk, so the returned text
    reflects the file at the time of the read rather than the time the
    change was noticed.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    def read(self, path: Path) -> str:
        """
        Read the current contents of a file.

        Args:
            path: File to read

        Returns:
            Decoded file contents

        Raises:
            ContentReadError: If the file is missing, unreadable or not valid text
        """
        try:
            return path.read_text(encoding=self._encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise ContentReadError(path, str(e)) from e


def default_stylesheet() -> str:
    """Stylesheet used when none is configured."""
    return (
        resources.files("content")
        .joinpath("static", "default.css")
        .read_text(encoding="utf-8")
    )
