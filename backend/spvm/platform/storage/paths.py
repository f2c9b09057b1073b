"""Centralized storage paths for persisted console state."""


class StoragePaths:
    """Storage path constants."""

    CONSOLE_PREFIX = "console"

    CONFIG = f"{CONSOLE_PREFIX}/config.json"
    SITES = f"{CONSOLE_PREFIX}/sites.json"
    REPORTS = f"{CONSOLE_PREFIX}/reports.json"


# Convenience alias
paths = StoragePaths
