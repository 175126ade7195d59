"""PKCE login, account handling, a SQLite tag and account cache, and image downloads for a pixiv client."""

__version__ = "0.1.0"
__all__ = ["accounts", "cache", "config", "downloader", "login"]