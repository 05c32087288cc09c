"""Parser for unified diff format using unidiff library."""

import re
from dataclasses import dataclass, field
from unidiff import PatchSet

SNIPPET_FILENAME = "snippet"

_DIFF_HEADER = re.compile(r"^(diff --git |--- |\+\+\+ |@@ )", re.MULTILINE)


@dataclass
class FileDiff:
    """Parsed diff for a single file."""
    filename: str
    status: str                           # added, deleted, modified, renamed
    additions: int                        # count of added lines
    deletions: int                        # count of deleted lines
    added_lines: list[tuple[int, str]] = field(default_factory=list)   # (line_num, content)


def looks_like_diff(text: str) -> bool:
    """True if *text* carries unified diff headers."""
    return bool(_DIFF_HEADER.search(text))


def parse_diff(diff_text: str) -> list[FileDiff]:
    """
    Parse a unified diff into structured FileDiff objects.

    Args:
        diff_text: Raw unified diff string

    Returns:
        List of FileDiff objects, one per file

    Raises:
        unidiff.UnidiffParseError: If the text is not a valid diff
    """
    patch_set = PatchSet(diff_text)
    files = []

    for patched_file in patch_set:
        if patched_file.is_added_file:
            status = "added"
        elif patched_file.is_removed_file:
            status = "deleted"
        elif patched_file.is_rename:
            status = "renamed"
        else:
            status = "modified"

        added_lines = []
        for hunk in patched_file:
            for line in hunk:
                if line.is_added:
                    added_lines.append((line.target_line_no, line.value.rstrip('\n')))

        files.append(FileDiff(
            filename=patched_file.path,
            status=status,
            additions=patched_file.added,
            deletions=patched_file.removed,
            added_lines=added_lines,
        ))

    return files


def snippet_as_file(code: str) -> FileDiff:
    """Wrap a bare code snippet as a single all-added file."""
    lines = code.rstrip('\n').split('\n')
    return FileDiff(
        filename=SNIPPET_FILENAME,
        status="added",
        additions=len(lines),
        deletions=0,
        added_lines=list(enumerate(lines, start=1)),
    )


# File extensions to skip during review
SKIP_EXTENSIONS = {
    '.md', '.txt', '.rst', '.adoc',           # Docs
    '.lock',                                   # Lock files
    '.png', '.jpg', '.jpeg', '.gif', '.svg', '.ico', '.webp',  # Images
    '.woff', '.woff2', '.ttf', '.eot',        # Fonts
    '.csv', '.json', '.xml', '.yaml', '.yml', '.toml',  # Data
    '.min.js', '.min.css', '.map',            # Build artifacts
    '.exe', '.dll', '.so', '.dylib', '.pyc',  # Binary
    '.zip', '.tar', '.gz', '.pdf',            # Archives/docs
}

SKIP_FILENAMES = {
    'package-lock.json', 'yarn.lock', 'pnpm-lock.yaml',
    'Pipfile.lock', 'poetry.lock', 'composer.lock',
    'Gemfile.lock', 'Cargo.lock', 'uv.lock',
    '.gitignore', '.gitattributes', '.editorconfig',
    'LICENSE', 'LICENSE.md', 'LICENSE.txt',
}

SKIP_DIRECTORIES = {'node_modules/', 'vendor/', 'dist/', 'build/', '.git/', '__pycache__/', '.venv/'}


def should_review_file(filename: str) -> bool:
    """Check if file should be reviewed based on name/extension."""
    for skip_dir in SKIP_DIRECTORIES:
        if filename.startswith(skip_dir) or f'/{skip_dir}' in filename:
            return False

    basename = filename.split('/')[-1]
    if basename in SKIP_FILENAMES:
        return False

    for ext in SKIP_EXTENSIONS:
        if filename.lower().endswith(ext):
            return False

    return True


def filter_files(files: list[FileDiff]) -> list[FileDiff]:
    """Drop files that shouldn't be reviewed (skipped types, deletions, no additions)."""
    return [
        file for file in files
        if should_review_file(file.filename)
        and file.status != 'deleted'
        and file.added_lines
    ]


def extract_added_code(file: FileDiff, include_line_numbers: bool = True) -> str:
    """
    Extract only the added lines as a code string.

    Args:
        file: FileDiff object
        include_line_numbers: If True, prefix each line with its line number

    Returns:
        String containing only the new code, ready for review
    """
    if not file.added_lines:
        return ""

    lines = []
    for line_num, content in file.added_lines:
        if include_line_numbers:
            lines.append(f"{line_num:4}| {content}")
        else:
            lines.append(content)

    return "\n".join(lines)
