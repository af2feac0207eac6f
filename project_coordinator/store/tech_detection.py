"""Technology detection for newly added projects."""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_TECHNOLOGY = "Swift"
SWIFTUI_MARKER = "import SwiftUI"


def expand_project_path(path: str) -> Path:
    return Path(os.path.expanduser(path))


def detect_tech_stack(path: str) -> list[str]:
    """
    Inspect a project directory for known build and framework signals

    Args:
        path: Project directory (``~`` is expanded)

    Returns:
        Distinct technology tags in detection order, or the default tag
        when nothing is recognised
    """
    root = expand_project_path(path)
    detected = []

    def add(tag: str) -> None:
        if tag not in detected:
            detected.append(tag)

    if (root / "Package.swift").is_file():
        add("Swift Package Manager")

    try:
        entries = sorted(root.iterdir())
    except OSError as e:
        logger.debug(f"Cannot list {root}: {e}")
        entries = []

    for entry in entries:
        if entry.suffix == ".xcodeproj":
            add("Xcode Project")
        elif entry.suffix == ".xcworkspace":
            add("Xcode Workspace")

    if entries and _uses_swiftui(root):
        add("SwiftUI")

    return detected or [DEFAULT_TECHNOLOGY]


def _uses_swiftui(root: Path) -> bool:
    for dirpath, dirnames, filenames in os.walk(root):
        # Skip .git, .build and similar
        dirnames[:] = [d for d in dirnames if not d.startswith(".")]
        for filename in filenames:
            if not filename.endswith(".swift"):
                continue
            try:
                with open(os.path.join(dirpath, filename), encoding="utf-8", errors="ignore") as f:
                    if SWIFTUI_MARKER in f.read():
                        return True
            except OSError:
                continue
    return False
