"""Manifest file discovery for ordergraph."""

from __future__ import annotations

from fnmatch import fnmatch
from typing import TYPE_CHECKING, cast

from gitignore_parser import parse_gitignore  # type: ignore[import-untyped]

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

MANIFEST_SUFFIX = ".units.toml"


def _relative_posix(path: Path, root: Path) -> str | None:
    """Relative POSIX path of ``path`` when it resolves inside ``root``."""
    try:
        return path.resolve().relative_to(root.resolve()).as_posix()
    except (OSError, ValueError):
        return None


def _gitignore_matcher(root: Path, *, nested: bool) -> Callable[[str], bool] | None:
    if nested:
        candidates = sorted(
            {p for p in root.rglob(".gitignore") if p.is_file()},
            key=lambda p: p.relative_to(root).as_posix(),
        )
    else:
        top = root / ".gitignore"
        candidates = [top] if top.is_file() else []

    if not candidates:
        return None
    if len(candidates) == 1:
        return cast("Callable[[str], bool]", parse_gitignore(candidates[0]))

    matchers = [parse_gitignore(path) for path in candidates]

    def ignored(path_str: str) -> bool:
        for matcher in matchers:
            try:
                if matcher(path_str):
                    return True
            except ValueError:
                # Paths outside a nested .gitignore's base dir are not its concern.
                continue
        return False

    return ignored


def is_manifest_selected(
    rel_path: str,
    *,
    output_dir: str,
    include_patterns: list[str] | None,
    exclude_patterns: list[str] | None,
) -> bool:
    """Apply output-dir, include and exclude filtering to a relative path."""
    if output_dir and rel_path.split("/", 1)[0] == output_dir:
        return False
    if include_patterns and not any(fnmatch(rel_path, pat) for pat in include_patterns):
        return False
    return not (
        exclude_patterns and any(fnmatch(rel_path, pat) for pat in exclude_patterns)
    )


def find_manifest_files(
    root: Path,
    *,
    output_dir: str = ".ordergraph",
    include_patterns: list[str] | None = None,
    exclude_patterns: list[str] | None = None,
    nested_gitignore: bool = False,
) -> Iterator[Path]:
    """Find every ``*.units.toml`` manifest under root, respecting .gitignore.

    Symlinks and files resolving outside the root are skipped.

    Yields:
        Manifest paths sorted by relative path for deterministic ordering.
    """
    ignored = _gitignore_matcher(root, nested=nested_gitignore)

    selected: list[tuple[str, Path]] = []
    for path in root.rglob(f"*{MANIFEST_SUFFIX}"):
        if not path.is_file() or path.is_symlink():
            continue
        rel_path = _relative_posix(path, root)
        if rel_path is None:
            continue
        if ignored is not None and ignored(str(path)):
            continue
        if is_manifest_selected(
            rel_path,
            output_dir=output_dir,
            include_patterns=include_patterns,
            exclude_patterns=exclude_patterns,
        ):
            selected.append((rel_path, path))

    selected.sort(key=lambda entry: entry[0])
    for _rel_path, path in selected:
        yield path


__all__ = ["MANIFEST_SUFFIX", "find_manifest_files", "is_manifest_selected"]
