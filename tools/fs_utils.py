# -*- coding: utf-8 -*-
import json
import os
import shutil
from pathlib import Path

import console_log

# Devvit Tools Filesystem Helpers

BOM = "\ufeff"


def ensure_dir(path):
    Path(path).mkdir(parents=True, exist_ok=True)


def path_exists(path):
    return os.path.exists(path)


def copy_dir(src, dest):
    """Recursive copy that merges into an existing destination."""
    shutil.copytree(src, dest, dirs_exist_ok=True)


def copy_file(src, dest):
    shutil.copyfile(src, dest)


def remove_path(path):
    path = Path(path)
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()


def read_utf8(path):
    """Reads UTF-8 text, dropping a leading byte-order mark."""
    with open(path, "r", encoding="utf-8", newline="") as f:
        text = f.read()
    if text.startswith(BOM):
        text = text[1:]
    return text


def write_utf8(path, text):
    """Writes UTF-8 text without a byte-order mark."""
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)


def walk_tree(root, skip_dirs=(), skip_exts=()):
    r"""
    Depth-first walk yielding ("dir" | "file", path) pairs.
    A directory is yielded after everything beneath it, so callers that rename
    entries as they go always touch the deepest paths first.
    Directories are skipped on exact name match; extensions compare lowercased.
    """
    with os.scandir(root) as it:
        entries = sorted(it, key=lambda e: e.name)
    for entry in entries:
        path = Path(entry.path)
        if entry.is_dir(follow_symlinks=False):
            if entry.name in skip_dirs:
                continue
            yield from walk_tree(path, skip_dirs, skip_exts)
            yield "dir", path
        elif entry.is_file():
            if path.suffix.lower() in skip_exts:
                continue
            yield "file", path


def update_json(path, mutator):
    r"""
    Read-modify-write of a JSON document.
    Missing files are ignored; unparsable files are left untouched with a warning.
    Output is 2-space indented with a trailing newline.
    """
    if not path_exists(path):
        return False
    try:
        data = json.loads(read_utf8(path))
    except ValueError:
        # UnicodeDecodeError is a ValueError too
        console_log.warn(f"{path} is not valid UTF-8 JSON; skipping structured update.")
        return False
    data = mutator(data)
    write_utf8(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")
    return True
