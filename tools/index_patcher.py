#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import re
import shutil
import sys

import console_log
import fs_utils
from pipeline_errors import MissingInputError

# Devvit Entry-Point Patcher
# Devvit serves the client as an ES module page, so the classic GameMaker
# runtime tag is swapped for a module that injects the runtime script and
# calls the init hook once it has loaded.
#
# Only the first loader tag is replaced; an export carries exactly one.

# --- CONFIGURATION ---
ASSET_DIR = "html5game"
INIT_HOOK = "GameMaker_Init"

PATCHED_RE = re.compile(r"""(?i)<script[^>]*\btype\s*=\s*['"]module['"]""")

LOADER_SNIPPET = """<script type="module">
  const s = document.createElement('script');
  s.src = '/{asset_dir}/{name}.js';
  s.onload = () => window.{hook}?.();
  document.head.appendChild(s);
</script>"""


class EntryPointPatcher:
    def __init__(self, asset_dir=ASSET_DIR, init_hook=INIT_HOOK):
        self.asset_dir = asset_dir
        self.init_hook = init_hook
        asset = re.escape(asset_dir)
        hook = re.escape(init_hook)
        # Classic runtime tag with an optional cache-busting query, e.g. /html5game/game.js?v=2
        self.loader_re = re.compile(
            r"""(?is)<script[^>]*?\bsrc\s*=\s*['"]\s*/?""" + asset
            + r"""/([^'"?]+?)\.js(?:\?[^'"]*)?['"][^>]*>\s*</script>"""
        )
        self.inline_init_re = re.compile(
            r"""(?is)\s*<script[^>]*>\s*window\.onload\s*=\s*""" + hook + r"""\s*;?\s*</script>"""
        )
        self.loose_re = re.compile(r"""(?is)<script[^>]*\bsrc[^>]*""" + asset + r"""[^>]*>""")

    def is_patched(self, html):
        return PATCHED_RE.search(html) is not None

    def find_loader(self, html):
        """Returns the runtime script name (without .js) or None."""
        m = self.loader_re.search(html)
        return m.group(1) if m else None

    def loader_snippet(self, name):
        return LOADER_SNIPPET.format(asset_dir=self.asset_dir, name=name, hook=self.init_hook)

    def patch(self, html):
        r"""
        Pure text transform. Already-patched documents come back unchanged.
        Raises MissingInputError when no loader tag is present.
        """
        if self.is_patched(html):
            return html

        m = self.loader_re.search(html)
        if not m:
            loose = self.loose_re.search(html)
            if loose:
                console_log.warn(f"Found {self.asset_dir} script but strict pattern didn't match:\n{loose.group(0)}")
            raise MissingInputError(f"Could not find {self.asset_dir}/*.js <script> tag")

        snippet = self.loader_snippet(m.group(1))
        html = html[:m.start()] + snippet + html[m.end():]
        return self.inline_init_re.sub("", html, count=1)


def patch_entry_point(index_path, patcher=None):
    r"""
    Patches index.html in place, keeping a copy at <path>.bak.
    Returns False when the file was already patched (no backup is written).
    """
    patcher = patcher or EntryPointPatcher()
    try:
        html = fs_utils.read_utf8(index_path)
    except UnicodeDecodeError as e:
        raise MissingInputError(f"{index_path} is not valid UTF-8 ({e.reason} at byte {e.start})") from e

    if patcher.is_patched(html):
        console_log.info(f"Already patched: {index_path}")
        return False

    try:
        patched = patcher.patch(html)
    except MissingInputError as e:
        raise MissingInputError(f"{e} in {index_path}") from e

    backup = f"{index_path}.bak"
    shutil.copyfile(index_path, backup)
    fs_utils.write_utf8(index_path, patched)
    console_log.info(f"Patched {index_path} (game file: {patcher.find_loader(html)}.js). Backup: {backup}")
    return True


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: index_patcher.py <path_to_index.html>")
        sys.exit(1)
    patch_entry_point(sys.argv[1])
