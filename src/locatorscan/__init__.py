"""Locator extraction and page-object generation for UI template sources."""

from __future__ import annotations

from .extractor import extract_file_locators
from .models import FileLocators, LocatorRecord, ScanResult
from .scanner import scan_project

__version__ = "0.1.0"

__all__ = [
    "FileLocators",
    "LocatorRecord",
    "ScanResult",
    "extract_file_locators",
    "scan_project",
]
