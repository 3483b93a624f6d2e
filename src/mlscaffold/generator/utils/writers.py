# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Artifact saving utilities.
"""
import logging
import os
import stat
import tempfile
from typing import Any, Dict, Iterable, List, Mapping, Union

import yaml

from ..errors import WriteConflict
from ..types import CompositionResult

logger = logging.getLogger(__name__)

CONFIG_RECORD = "scaffold_config.yaml"


def _as_files(results: Union[Mapping[str, str], Iterable[CompositionResult]]) -> Dict[str, str]:
    if isinstance(results, Mapping):
        return dict(results)
    return {r.path: r.content for r in results}


def _target(root_dir: str, rel_path: str) -> str:
    if os.path.isabs(rel_path) or ".." in rel_path.replace("\\", "/").split("/"):
        raise ValueError(f"Artifact path must stay under the output root: {rel_path}")
    return os.path.join(root_dir, *rel_path.split("/"))


def render_config_record(config: Mapping[str, Any]) -> str:
    """YAML record of a normalized configuration, for reproducing a scaffold."""
    return yaml.safe_dump(dict(config), sort_keys=False, default_flow_style=False)


def _missing_dirs(path: str) -> List[str]:
    """Directories that os.makedirs(path) would create, outermost first."""
    missing: List[str] = []
    while path and not os.path.isdir(path):
        missing.append(path)
        parent = os.path.dirname(path)
        if parent == path:
            break
        path = parent
    return list(reversed(missing))


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def _sibling(out_path: str, tag: str) -> str:
    """Reserve a unique hidden file next to out_path."""
    f = tempfile.NamedTemporaryFile(
        dir=os.path.dirname(out_path) or ".",
        prefix=f".{os.path.basename(out_path)}.{tag}-",
        delete=False,
    )
    f.close()
    return f.name


def _stage(out_path: str, content: str, umask: int) -> str:
    """Write content to a temp sibling of out_path with the final mode; return its path."""
    if os.path.isdir(out_path):
        raise IsADirectoryError(f"Artifact target is a directory: {out_path}")
    if os.path.lexists(out_path):
        mode = stat.S_IMODE(os.stat(out_path).st_mode)
    else:
        mode = 0o666 & ~umask
    if content.startswith("#!"):
        mode |= stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH
    tmp_path = _sibling(out_path, "tmp")
    try:
        with open(tmp_path, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
        os.chmod(tmp_path, mode)
    except OSError:
        os.remove(tmp_path)
        raise
    return tmp_path


def _discard(paths: Iterable[str], what: str) -> None:
    for path in paths:
        try:
            os.remove(path)
        except OSError:
            logger.warning("Could not remove %s %s", what, path)


def emit(
    root_dir: str,
    results: Union[Mapping[str, str], Iterable[CompositionResult]],
    overwrite: bool = False,
) -> List[str]:
    """
    Persist artifacts under root_dir and return the paths written, in order.

    All targets are checked before anything is written. If any exists and
    overwrite is False, WriteConflict lists every collision and nothing is
    written.

    Every file is first staged as a temp sibling of its target. Targets are
    only replaced once all files are staged, and replaced originals are kept
    aside until the last one lands. On any failure the originals are put back
    and everything this call created is removed.
    """
    files = _as_files(results)
    targets = {rel: _target(root_dir, rel) for rel in files}

    conflicts = [t for t in targets.values() if os.path.lexists(t)]
    if conflicts and not overwrite:
        raise WriteConflict(conflicts)

    umask = _current_umask()
    new_dirs: List[str] = []
    staged: Dict[str, str] = {}
    # (target, backup of the original or None when the target is new)
    committed: List[tuple] = []
    try:
        for rel, content in files.items():
            out_path = targets[rel]
            parent = os.path.dirname(out_path) or "."
            new_dirs.extend(_missing_dirs(parent))
            os.makedirs(parent, exist_ok=True)
            staged[out_path] = _stage(out_path, content, umask)

        for out_path, tmp_path in staged.items():
            backup = None
            if os.path.lexists(out_path):
                backup = _sibling(out_path, "bak")
                try:
                    os.replace(out_path, backup)
                except OSError:
                    os.remove(backup)
                    raise
            committed.append((out_path, backup))
            os.replace(tmp_path, out_path)
            logger.debug("Wrote %s", out_path)
    except OSError:
        for out_path, backup in reversed(committed):
            try:
                if backup is not None:
                    os.replace(backup, out_path)
                elif os.path.lexists(out_path):
                    os.remove(out_path)
            except OSError:
                logger.warning("Could not restore %s", out_path)
        _discard((p for p in staged.values() if os.path.lexists(p)), "staged file")
        for path in (d for d in reversed(new_dirs) if os.path.isdir(d)):
            try:
                os.rmdir(path)
            except OSError:
                logger.warning("Could not remove directory %s", path)
        raise

    _discard((b for _, b in committed if b is not None), "backup")
    written = list(staged)
    logger.info("Wrote %d files under %s", len(written), root_dir)
    return written
