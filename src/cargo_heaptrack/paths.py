from __future__ import annotations

from pathlib import Path

from .config import MANIFEST_FILE_NAME
from .errors import InvalidManifestPath, ManifestNotFound


def find_crate_root(
    manifest_path: Path | None,
    *,
    cwd: Path | None = None,
    manifest_name: str = MANIFEST_FILE_NAME,
) -> Path:
    """Return the directory packages must live under to be considered in scope.

    With an explicit manifest path this is its canonicalized parent directory; otherwise
    the nearest ancestor of the working directory (inclusive) holding `Cargo.toml`.
    """
    if manifest_path is not None:
        parent = manifest_path.parent
        if manifest_path.name in {"", ".", ".."}:
            raise InvalidManifestPath(f"the manifest path '{manifest_path}' must point to a {manifest_name} file")
        hint = f"Hint: make sure your manifest path exists and points to a {manifest_name} file"
        try:
            root = parent.resolve(strict=True)
        except (OSError, RuntimeError) as e:
            raise InvalidManifestPath(f"failed to canonicalize manifest parent directory '{parent}': {e}\n{hint}") from e
        if not root.is_dir():
            raise InvalidManifestPath(f"manifest parent '{root}' is not a directory\n{hint}")
        return root

    try:
        start = (cwd if cwd is not None else Path.cwd()).resolve()
    except OSError as e:
        raise ManifestNotFound(f"failed to determine working directory: {e}") from e

    for current in (start, *start.parents):
        if (current / manifest_name).exists():
            return current
    raise ManifestNotFound(f"could not find '{manifest_name}' in '{start}' or any parent directory")
