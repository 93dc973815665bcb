"""File type detection."""

from pathlib import PurePosixPath

LANGUAGE_BY_EXTENSION = {
    "ts": "typescript",
    "tsx": "typescript",
    "js": "javascript",
    "jsx": "javascript",
    "py": "python",
    "go": "go",
    "rs": "rust",
    "java": "java",
    "rb": "ruby",
    "php": "php",
    "cs": "csharp",
    "cpp": "cpp",
    "c": "c",
    "swift": "swift",
    "kt": "kotlin",
}

BINARY_EXTENSIONS = {
    ".png", ".jpg", ".jpeg", ".gif", ".ico", ".pdf", ".zip", ".tar", ".gz",
    ".exe", ".dll", ".so", ".dylib", ".woff", ".woff2", ".ttf", ".eot",
}


def detect_language(filename: str) -> str:
    """Map a filename to a language name, ``"text"`` if unknown."""
    suffix = PurePosixPath(filename).suffix.lower().lstrip(".")
    return LANGUAGE_BY_EXTENSION.get(suffix, "text")


def is_binary_file(filename: str) -> bool:
    return PurePosixPath(filename).suffix.lower() in BINARY_EXTENSIONS
