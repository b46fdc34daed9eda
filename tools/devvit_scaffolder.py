#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import re
import sys
import unicodedata
from pathlib import Path

import console_log
import fs_utils
from extension_options import is_valid_subreddit_name
from process_runner import ProcessRunner

# Devvit Project Scaffolder
# Clones the Devvit template once and personalizes its manifests.

# --- CONFIGURATION ---
MANIFEST = "devvit.json"
PACKAGE_MANIFEST = "package.json"
SUBREDDIT_MAX_LEN = 21
SUBREDDIT_MIN_LEN = 3
DEV_SUFFIX = "_dev"
FALLBACK_PREFIX = "r"
FALLBACK_SUBREDDIT = "dev_subreddit"


def to_dev_subreddit(name, min_len=SUBREDDIT_MIN_LEN, max_len=SUBREDDIT_MAX_LEN, fallback_prefix=FALLBACK_PREFIX):
    r"""
    Derives a subreddit-safe identifier from an arbitrary string.
    Example: "café game!" -> "cafe_game"
    """
    s = str(name or "").strip()

    # 1. Strip diacritics
    s = unicodedata.normalize("NFKD", s)
    s = "".join(ch for ch in s if not unicodedata.category(ch).startswith("M"))

    # 2. Collapse everything unsupported into single underscores
    s = re.sub(r"[^A-Za-z0-9_]+", "_", s)
    s = re.sub(r"_+", "_", s).strip("_")

    # 3. Must start with a letter
    if not re.match(r"[A-Za-z]", s):
        s = (fallback_prefix + "_" + s).rstrip("_")

    # 4. Clamp, then pad
    if len(s) > max_len:
        s = s[:max_len].rstrip("_")
    while len(s) < min_len:
        s += "_"

    return s or FALLBACK_SUBREDDIT


def resolve_dev_subreddit(hint, project_name):
    hint = hint or project_name
    if is_valid_subreddit_name(hint):
        return hint
    return to_dev_subreddit(hint, max_len=SUBREDDIT_MAX_LEN - len(DEV_SUFFIX)) + DEV_SUFFIX


def personalize_package(data, project_name):
    if isinstance(data, dict):
        data["name"] = project_name
    return data


def personalize_manifest(data, project_name, dev_subreddit):
    if not isinstance(data, dict):
        return data
    data["name"] = project_name

    menu = data.get("menu")
    items = menu.get("items") if isinstance(menu, dict) else None
    if isinstance(items, list) and items and isinstance(items[0], dict):
        items[0]["description"] = project_name

    if not isinstance(data.get("dev"), dict):
        data["dev"] = {}
    data["dev"]["subreddit"] = dev_subreddit
    return data


def ensure_project(output_dir, project_name, template_url, dev_subreddit_hint=None, runner=None):
    r"""
    Returns the project directory, cloning and personalizing the template first when
    no devvit.json is present. An existing project is never re-cloned.
    """
    project_dir = Path(output_dir) / project_name
    if (project_dir / MANIFEST).exists():
        return project_dir

    runner = runner or ProcessRunner()
    console_log.info(f"No devvit project found. Cloning template to {project_dir} ...")
    fs_utils.ensure_dir(output_dir)
    runner.run("git", ["clone", template_url, project_name], cwd=str(output_dir), wait=True, new_window=False)

    dev_subreddit = resolve_dev_subreddit(dev_subreddit_hint, project_name)
    fs_utils.update_json(project_dir / PACKAGE_MANIFEST, lambda d: personalize_package(d, project_name))
    fs_utils.update_json(project_dir / MANIFEST, lambda d: personalize_manifest(d, project_name, dev_subreddit))
    console_log.info(f"Template cloned and personalized (dev subreddit: {dev_subreddit}).")
    return project_dir


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: devvit_scaffolder.py <name_to_sanitize>")
        sys.exit(1)
    print(to_dev_subreddit(sys.argv[1]))
