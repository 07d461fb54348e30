"""
Directory sync for namespaces bound to a local ``bucket`` directory.

Every regular file under the directory becomes one key, named by its path
relative to the directory with "/" separators. Values travel base64-encoded
so binary files survive the JSON bulk payload.
"""

import base64
import os

from kvctl.exceptions import CliError


def _walk_files(directory):
    """Yield (path, key) for every file under *directory*, in a stable order."""
    if not os.path.isdir(directory):
        raise CliError(f"[ERROR] {directory} is not a directory.")
    for root, dirs, files in os.walk(directory):
        dirs.sort()
        for name in sorted(files):
            path = os.path.join(root, name)
            yield path, os.path.relpath(path, directory).replace(os.sep, "/")


def directory_keys(directory):
    keys = [key for _, key in _walk_files(directory)]
    if not keys:
        raise CliError(f"[ERROR] No files found in {directory}.")
    return keys


def directory_pairs(directory):
    """Build bulk put pairs for every file under *directory*."""
    pairs = []
    for path, key in _walk_files(directory):
        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise CliError(f"[ERROR] Cannot read {path}: {e.strerror or e}") from e
        pairs.append(
            {"key": key, "value": base64.b64encode(data).decode("ascii"), "base64": True}
        )
    if not pairs:
        raise CliError(f"[ERROR] No files found in {directory}.")
    return pairs
