"""Shared path and line heuristics."""

from __future__ import annotations

from pathlib import PurePosixPath
from re import compile

LANGUAGE_BY_EXTENSION = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".py": "python",
    ".java": "java",
    ".kt": "kotlin",
    ".go": "go",
    ".rs": "rust",
    ".rb": "ruby",
    ".php": "php",
    ".cs": "csharp",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".c": "c",
    ".h": "c",
    ".swift": "swift",
    ".vue": "vue",
    ".css": "css",
    ".scss": "scss",
    ".html": "html",
    ".sql": "sql",
    ".sh": "shell",
    ".md": "markdown",
    ".json": "json",
    ".yml": "yaml",
    ".yaml": "yaml",
    ".toml": "toml",
}

SOURCE_LANGUAGES = {
    "javascript",
    "typescript",
    "python",
    "java",
    "kotlin",
    "go",
    "rust",
    "ruby",
    "php",
    "csharp",
    "cpp",
    "c",
    "swift",
    "vue",
}

DOC_SUFFIXES = {".md", ".rst", ".txt", ".adoc"}

MANIFEST_FILES = {
    "pyproject.toml",
    "requirements.txt",
    "setup.py",
    "setup.cfg",
    "package.json",
    "pom.xml",
    "cargo.toml",
    "go.mod",
}

LOCK_FILES = {
    "poetry.lock",
    "pdm.lock",
    "pipfile.lock",
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "cargo.lock",
}

DEFAULT_CRITICAL_PATTERNS = (
    "package.json",
    "pyproject.toml",
    "requirements.txt",
    "go.mod",
    "cargo.toml",
    "pom.xml",
    "dockerfile",
    "docker-compose",
    ".env",
    "migrations/",
    "alembic/",
)

DEFAULT_SYSTEM_CONFIG_PATTERNS = (
    "package.json",
    "tsconfig.json",
    "webpack.config",
    "vite.config",
    "babel.config",
    "dockerfile",
    "docker-compose",
    "pyproject.toml",
    "setup.cfg",
)

DEFAULT_SECURITY_PATH_MARKERS = (
    ".env",
    "security",
    "auth",
    "secret",
    "credential",
    "permission",
    "crypto",
)

BREAKING_TOKEN_RE = compile(r"\b(?:export|function|class)\b")
STRUCTURAL_TOKEN_RE = compile(r"\b(?:function|class|import)\b")
CREDENTIAL_KEYWORD_RE = compile(
    r"(?i)(?:password|passwd|secret|token|api_?key|private_?key|access_?key)"
)
ERROR_HANDLING_RE = compile(r"\b(?:try|catch|except|raise|throw)\b")
BUGFIX_LINE_RE = compile(r"(?i)\b(?:try|catch|error)\b")


def detect_language(path: str) -> str:
    """Return the language name for a path, or ``unknown``."""
    pure_path = PurePosixPath(path.lower())
    if pure_path.name == "dockerfile":
        return "dockerfile"
    return LANGUAGE_BY_EXTENSION.get(pure_path.suffix, "unknown")


def is_source_path(path: str) -> bool:
    return detect_language(path) in SOURCE_LANGUAGES


def is_test_path(path: str) -> bool:
    lowered = path.lower()
    pure_path = PurePosixPath(lowered)
    name = pure_path.name
    return (
        lowered.startswith("tests/")
        or "/tests/" in lowered
        or lowered.startswith("test/")
        or "/test/" in lowered
        or "__tests__/" in lowered
        or name.startswith("test_")
        or name.endswith("_test.py")
        or name.endswith("_test.go")
        or ".test." in name
        or ".spec." in name
    )


def is_doc_path(path: str) -> bool:
    lowered = path.lower()
    pure_path = PurePosixPath(lowered)
    return (
        pure_path.suffix in DOC_SUFFIXES
        or lowered.startswith("docs/")
        or "/docs/" in lowered
    )


def is_manifest_path(path: str) -> bool:
    return PurePosixPath(path.lower()).name in MANIFEST_FILES


def is_lock_path(path: str) -> bool:
    return PurePosixPath(path.lower()).name in LOCK_FILES


def is_config_path(path: str) -> bool:
    lowered = path.lower()
    pure_path = PurePosixPath(lowered)
    filename = pure_path.name
    return (
        filename.startswith(".env")
        or "config/" in lowered
        or "settings/" in lowered
        or ".github/workflows/" in lowered
        or "docker-compose" in lowered
        or "k8s/" in lowered
        or "helm/" in lowered
        or filename.endswith(".config.js")
        or filename.endswith(".config.ts")
        or pure_path.suffix in {".yml", ".yaml", ".ini", ".cfg", ".toml"}
        or filename in {"nginx.conf", "gunicorn.conf.py", "tsconfig.json", ".eslintrc.json"}
    )


def is_critical_path(path: str, patterns: tuple[str, ...] | list[str] | None = None) -> bool:
    """Return True when a path is a manifest, infra, env or migration file."""
    return _contains_any(path.lower(), tuple(patterns or DEFAULT_CRITICAL_PATTERNS))


def is_system_config_path(
    path: str, patterns: tuple[str, ...] | list[str] | None = None
) -> bool:
    return _contains_any(path.lower(), tuple(patterns or DEFAULT_SYSTEM_CONFIG_PATTERNS))


def is_security_sensitive_path(
    path: str, markers: tuple[str, ...] | list[str] | None = None
) -> bool:
    return _contains_any(path.lower(), tuple(markers or DEFAULT_SECURITY_PATH_MARKERS))


def is_breaking_removal(content: str) -> bool:
    """Return True when a removed line carries an export/function/class token."""
    return BREAKING_TOKEN_RE.search(content) is not None


def has_structural_token(content: str) -> bool:
    return STRUCTURAL_TOKEN_RE.search(content) is not None


def has_credential_keyword(content: str) -> bool:
    return CREDENTIAL_KEYWORD_RE.search(content) is not None


def has_error_handling(content: str) -> bool:
    return ERROR_HANDLING_RE.search(content) is not None


def has_bugfix_keyword(content: str) -> bool:
    return BUGFIX_LINE_RE.search(content) is not None


def clip_line(content: str, max_len: int = 80) -> str:
    stripped = content.strip()
    if len(stripped) <= max_len:
        return stripped
    return stripped[: max_len - 3] + "..."


def _contains_any(value: str, needles: tuple[str, ...]) -> bool:
    return any(needle in value for needle in needles)
