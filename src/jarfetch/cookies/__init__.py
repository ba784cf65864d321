"""Cookie jar and its on-disk persistence."""

from .jar import JAR_DOCUMENT_VERSION, CookieJarDocument, CookieRecord, PersistentCookieJar
from .store import CookieStore

__all__ = [
    "CookieJarDocument",
    "CookieRecord",
    "CookieStore",
    "JAR_DOCUMENT_VERSION",
    "PersistentCookieJar",
]
