#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import os
import shutil
import sys
from collections import namedtuple
from pathlib import Path

import console_log
import fs_utils

# Devvit Placeholder Expander
# Replaces a literal template marker (e.g. "<% name %>") across a project tree.
# Uses plain substring replacement, never regex, so markers need no escaping.

# --- CONFIGURATION ---
SKIP_DIRS = {".git", "node_modules", "dist", "build"}
SKIP_EXTS = {".png", ".jpg", ".jpeg", ".gif", ".ico", ".pdf", ".zip", ".wasm", ".mp3", ".ogg", ".bak"}

ExpansionResult = namedtuple("ExpansionResult", ["changed_files", "renamed_paths"])


def escape_json_string(value):
    """Escapes a value for embedding between the quotes of a JSON string."""
    return (value.replace("\\", "\\\\")
                 .replace('"', '\\"')
                 .replace("\t", "\\t")
                 .replace("\r", "\\r")
                 .replace("\n", "\\n"))


def _rename(path, placeholder, replacement):
    """Returns the new path, or None when the entry was left in place."""
    dest = path.with_name(path.name.replace(placeholder, replacement))
    if dest == path:
        return None
    if dest.exists():
        console_log.warn(f"Cannot rename {path}: {dest.name} already exists.")
        return None
    os.rename(path, dest)
    console_log.debug(f"Renamed {path} -> {dest.name}")
    return dest


def expand_file(path, placeholder, replacement, backup=True):
    try:
        text = fs_utils.read_utf8(path)
    except UnicodeDecodeError:
        console_log.warn(f"Skipping non UTF-8 file: {path}")
        return False
    if placeholder not in text:
        return False

    value = escape_json_string(replacement) if path.suffix.lower() == ".json" else replacement
    if backup:
        shutil.copyfile(path, f"{path}.bak")
    fs_utils.write_utf8(path, text.replace(placeholder, value))
    console_log.debug(f"Expanded: {path}")
    return True


def expand_placeholder(root_dir, placeholder, replacement, rename_paths=False, backup=True):
    r"""
    Expands `placeholder` in every text file under `root_dir`, optionally renaming
    files and directories whose names contain it. Paths are visited deepest first,
    so renaming a directory never strands a pending child path.
    Finding nothing is not an error.
    """
    if not placeholder:
        raise ValueError("placeholder must be a non-empty string")

    changed = 0
    renamed = 0
    for kind, path in fs_utils.walk_tree(Path(root_dir), SKIP_DIRS, SKIP_EXTS):
        # Rename before expanding so a backup is written under the final name.
        if rename_paths and placeholder in path.name:
            dest = _rename(path, placeholder, replacement)
            if dest is not None:
                path = dest
                renamed += 1
        if kind == "file" and expand_file(path, placeholder, replacement, backup):
            changed += 1

    summary = f'Placeholder "{placeholder}" -> "{replacement}": {changed} file(s) changed'
    if rename_paths:
        summary += f", {renamed} path(s) renamed"
    console_log.info(summary + ".")
    return ExpansionResult(changed, renamed)


if __name__ == "__main__":
    if len(sys.argv) < 4:
        print("Usage: placeholder_expander.py <project_path> <placeholder> <replacement> [--rename]")
        sys.exit(1)
    expand_placeholder(sys.argv[1], sys.argv[2], sys.argv[3], rename_paths="--rename" in sys.argv)
