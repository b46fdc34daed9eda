# -*- coding: utf-8 -*-
from pathlib import Path

import console_log
import fs_utils
from pipeline_errors import MissingInputError

# Devvit Build Transplanter
# Moves a fresh HTML5 export into the Devvit client directory:
#   <source>/html5game/   -> <client>/public/html5game/
#   <source>/favicon.ico  -> <client>/public/favicon.ico
#   <source>/index.html   -> <client>/index.html

# --- CONFIGURATION ---
ASSET_DIR = "html5game"
FAVICON = "favicon.ico"
ENTRY_HTML = "index.html"
PUBLIC_DIR = "public"


def clean_client_output(client_dir):
    """Removes only the build output this pipeline owns inside the client directory."""
    client_dir = Path(client_dir)
    fs_utils.ensure_dir(client_dir)
    fs_utils.remove_path(client_dir / ENTRY_HTML)
    fs_utils.remove_path(client_dir / PUBLIC_DIR)


def transplant(source_dir, client_dir, asset_dir=ASSET_DIR):
    source_dir = Path(source_dir)
    client_dir = Path(client_dir)

    entry_src = source_dir / ENTRY_HTML
    if not entry_src.is_file():
        raise MissingInputError(f"Missing source {ENTRY_HTML} at {entry_src}")

    dest_public = client_dir / PUBLIC_DIR
    fs_utils.ensure_dir(dest_public)

    # 1. Asset subtree
    assets_src = source_dir / asset_dir
    if assets_src.is_dir():
        fs_utils.copy_dir(assets_src, dest_public / asset_dir)
        console_log.debug(f"Copied {assets_src} -> {dest_public / asset_dir}")
    else:
        console_log.warn(f"Source {asset_dir} folder not found at {assets_src}")

    # 2. Favicon (optional)
    favicon_src = source_dir / FAVICON
    if favicon_src.is_file():
        fs_utils.copy_file(favicon_src, dest_public / FAVICON)

    # 3. Entry point
    entry_dest = client_dir / ENTRY_HTML
    fs_utils.copy_file(entry_src, entry_dest)
    console_log.info(f"Build copied into {client_dir}")
    return entry_dest
