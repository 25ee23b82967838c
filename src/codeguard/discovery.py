"""File discovery and language detection.

Turns the paths given on the command line into the ordered list of files to
analyze. Directories are walked in sorted order so runs are reproducible;
test sources are excluded and oversized files are skipped with a warning.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE = 1024 * 1024  # 1 MiB

LANGUAGE_BY_EXTENSION: dict[str, str] = {
    ".java": "Java",
    ".js": "JavaScript",
    ".ts": "TypeScript",
    ".py": "Python",
    ".cpp": "C++",
    ".cc": "C++",
    ".c": "C",
    ".cs": "C#",
    ".php": "PHP",
    ".rb": "Ruby",
    ".go": "Go",
    ".kt": "Kotlin",
    ".scala": "Scala",
}

SUPPORTED_EXTENSIONS = frozenset(LANGUAGE_BY_EXTENSION)

# Build and dependency manifests worth reviewing alongside code
SUPPORTED_CONFIG_FILES = frozenset(
    {
        "pom.xml",
        "build.gradle",
        "build.gradle.kts",
        "build.xml",
        "ivy.xml",
        "package.json",
        "package-lock.json",
        "yarn.lock",
        "requirements.txt",
        "pyproject.toml",
        "setup.py",
        "pipfile",
        "pipfile.lock",
        "composer.json",
        "composer.lock",
        "cargo.toml",
        "cargo.lock",
        "go.mod",
        "go.sum",
        "packages.config",
        "makefile",
        "cmakelists.txt",
        "vcpkg.json",
        "gemfile",
    }
)

_CONFIG_SUFFIXES = (".csproj", ".fsproj")
_TEST_MARKERS = ("test", "spec", "mock")
_TEST_DIRECTORIES = frozenset({"test", "tests"})
_SKIP_DIRECTORIES = frozenset(
    {".git", ".hg", ".svn", "node_modules", "__pycache__", ".venv", "venv", "build", "dist", "target"}
)


def detect_language(path: Path | str) -> str:
    """Map a file extension to a language label ("Unknown" if unmapped)."""
    return LANGUAGE_BY_EXTENSION.get(Path(path).suffix.lower(), "Unknown")


def is_config_file(path: Path | str) -> bool:
    name = Path(path).name.lower()
    return name in SUPPORTED_CONFIG_FILES or name.endswith(_CONFIG_SUFFIXES)


def is_test_path(path: Path | str, root: Path | None = None) -> bool:
    """Check whether a path looks like test code.

    A file is test code when its name mentions test, spec or mock, or when
    a parent directory is named test or tests. With root given, only the
    directories below root are considered.
    """
    path = Path(path)
    name = path.name.lower()
    if any(marker in name for marker in _TEST_MARKERS):
        return True
    parent = path.parent
    if root is not None and parent.is_relative_to(root):
        parent = parent.relative_to(root)
    return any(part.lower() in _TEST_DIRECTORIES for part in parent.parts)


def is_candidate_file(path: Path | str, root: Path | None = None) -> bool:
    """Check whether a file should be analyzed (code or manifest, not test)."""
    path = Path(path)
    is_code = path.suffix.lower() in SUPPORTED_EXTENSIONS
    return (is_code or is_config_file(path)) and not is_test_path(path, root)


def _walk(directory: Path) -> Iterable[Path]:
    for entry in sorted(directory.iterdir(), key=lambda p: p.name):
        if entry.is_dir():
            if entry.name in _SKIP_DIRECTORIES:
                continue
            yield from _walk(entry)
        elif entry.is_file():
            yield entry


def _within_size_limit(path: Path, max_file_size: int) -> bool:
    try:
        size = path.stat().st_size
    except OSError as e:
        logger.warning("Cannot stat %s: %s", path, e)
        return False
    if size > max_file_size:
        logger.warning(
            "Skipping %s: %d bytes exceeds the %d byte limit", path, size, max_file_size
        )
        return False
    return True


def discover_files(
    paths: Iterable[Path | str],
    scan_directory: Path | str | None = None,
    max_file_size: int = DEFAULT_MAX_FILE_SIZE,
) -> list[Path]:
    """Resolve input paths into the ordered list of files to analyze.

    When scan_directory is given it replaces the explicit paths. Explicit
    files are kept in the order given (if they pass the candidate filter);
    directories are expanded recursively in sorted order. Duplicates are
    removed, keeping the first occurrence.

    Args:
        paths: Files or directories from the command line
        scan_directory: Directory to scan recursively instead of paths
        max_file_size: Files larger than this many bytes are skipped

    Returns:
        Ordered, de-duplicated list of files
    """
    roots = [Path(scan_directory)] if scan_directory else [Path(p) for p in paths]

    discovered: list[Path] = []
    seen: set[Path] = set()

    for root in roots:
        if root.is_dir():
            logger.info("Scanning directory for code files: %s", root)
            candidates = [p for p in _walk(root) if is_candidate_file(p, root)]
        elif root.is_file():
            if not is_candidate_file(root):
                logger.debug("Ignoring unsupported or test file: %s", root)
                continue
            candidates = [root]
        else:
            logger.warning("Path does not exist: %s", root)
            continue

        for candidate in candidates:
            key = candidate.resolve()
            if key in seen or not _within_size_limit(candidate, max_file_size):
                continue
            seen.add(key)
            discovered.append(candidate)

    logger.debug("Discovered %d files", len(discovered))
    return discovered


def read_file_content(path: Path | str) -> str:
    """Read a file as UTF-8 text.

    Raises:
        OSError: If the file cannot be read
        UnicodeDecodeError: If the file is not valid UTF-8
    """
    logger.debug("Reading file content: %s", path)
    return Path(path).read_text(encoding="utf-8")
