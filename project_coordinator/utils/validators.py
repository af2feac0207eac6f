"""
Input validation utilities
Sanitises tool arguments before they reach the project store
"""

import os
import re
from pathlib import Path

from ..config import SecurityConfig
from ..errors import ValidationError

PATH_TRAVERSAL_PATTERNS = ["../", "..\\", "/..", "\\..", "..%2F", "..%5C"]

SCRIPT_PATTERNS = ["<script", "</script>", "javascript:", "data:text/html", "vbscript:"]

INJECTION_PATTERNS = [
    "$(", "`", "eval(", "exec(", "system(", "rm -", "del ", "format(",
    "$(IFS)", "${IFS}", "$IFS", "&&", "||", ";", "|", ">", "<",
]

# Letters and digits from any script, whitespace, and -_.()[]
_NAME_PATTERN = re.compile(r"^[\w\s\-.()\[\]]+$", re.UNICODE)

# C0 controls except tab, newline and carriage return, plus DEL
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


class SecurityValidator:
    """Validates names, paths, free text and search patterns."""

    def __init__(self, config: SecurityConfig):
        self.config = config

    @property
    def allowed_base_paths(self) -> list[str]:
        return [os.path.normpath(os.path.expanduser(p)) for p in self.config.allowed_paths]

    def validate_project_name(self, name: str) -> str:
        """
        Validate project name

        Args:
            name: Project name to validate

        Returns:
            Trimmed project name

        Raises:
            ValidationError: If the name is empty, too long, or contains
                characters outside the allowed set
        """
        if not name or not name.strip():
            raise ValidationError("Project name cannot be empty")

        if len(name) > self.config.max_project_name_length:
            raise ValidationError(
                f"Project name exceeds maximum length of {self.config.max_project_name_length} characters",
                suggestion=f"Please shorten the project name to {self.config.max_project_name_length} characters or fewer.",
            )

        if ".." in name or "/" in name or "\\" in name:
            raise ValidationError(
                "Invalid format: Project name cannot contain path separators or parent directory references"
            )

        if not _NAME_PATTERN.match(name):
            raise ValidationError(
                "Project name contains invalid characters. Only letters, numbers, spaces, "
                "hyphens, underscores, parentheses, and brackets are allowed",
                suggestion="Please use only standard characters in the field.",
            )

        return name.strip()

    def validate_project_path(self, path: str) -> str:
        """
        Validate project path and resolve it against the allowed directories

        Returns:
            Normalised absolute path

        Raises:
            ValidationError: On traversal attempts or paths outside the allow-list
        """
        if not path:
            raise ValidationError("Project path cannot be empty")

        if len(path) > self.config.max_path_length:
            raise ValidationError(
                f"Project path exceeds maximum allowed length of {self.config.max_path_length} characters"
            )

        normalized = os.path.normpath(os.path.abspath(os.path.expanduser(path)))

        for pattern in PATH_TRAVERSAL_PATTERNS:
            if pattern in path or pattern in normalized:
                raise ValidationError(
                    "Path traversal attempt detected. Paths cannot contain '..' or similar patterns",
                    suggestion="Use absolute paths or paths relative to your home directory without '..' components.",
                )

        allowed = self.allowed_base_paths
        if not any(_is_within(normalized, base) or _is_within(base, normalized) for base in allowed):
            listing = "\n".join(f"  • {base}" for base in allowed)
            raise ValidationError(
                f"Path '{normalized}' is outside allowed directories.\n\n"
                f"Allowed directories:\n{listing}\n\n"
                f"To add a new allowed directory, update allowedPaths in security-config.json.",
                suggestion="Move your project to one of the allowed directories, or update the "
                           "security configuration to include your preferred directory.",
            )

        return normalized

    def validate_text(self, text: str, max_length: int, field_name: str) -> str:
        """
        Validate and sanitise free text (descriptions, notes, status)

        Script-like markers and control characters are stripped rather than
        rejected so ordinary prose survives.
        """
        if len(text) > max_length:
            raise ValidationError(
                f"{field_name} exceeds maximum length of {max_length} characters",
                suggestion=f"Please shorten the {field_name.lower()} to {max_length} characters or fewer.",
            )

        sanitized = text
        for pattern in SCRIPT_PATTERNS:
            sanitized = re.sub(re.escape(pattern), "", sanitized, flags=re.IGNORECASE)

        sanitized = _CONTROL_CHARS.sub("", sanitized)
        return sanitized.strip()

    def validate_search_pattern(self, pattern: str) -> str:
        """Validate search patterns to prevent injection attacks"""
        if not pattern or not pattern.strip():
            raise ValidationError("Search pattern cannot be empty")

        if len(pattern) > self.config.max_search_pattern_length:
            raise ValidationError(
                f"Search pattern exceeds maximum length of {self.config.max_search_pattern_length} characters"
            )

        for dangerous in INJECTION_PATTERNS:
            if dangerous in pattern:
                raise ValidationError(
                    f"Security violation: Search pattern contains potentially dangerous content: {dangerous}"
                )

        return pattern.strip()

    def verify_path_exists(self, path: str) -> None:
        """Check that the path is an existing, readable directory."""
        target = Path(path)
        if not target.exists():
            raise ValidationError(f"The specified path does not exist: {path}")
        if not target.is_dir():
            raise ValidationError(f"The specified path is not a directory: {path}")
        if not os.access(target, os.R_OK):
            raise ValidationError(f"Cannot read the specified directory: {path}")


def _is_within(path: str, base: str) -> bool:
    try:
        return os.path.commonpath([path, base]) == base
    except ValueError:
        return False
