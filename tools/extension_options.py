# -*- coding: utf-8 -*-
import re
from dataclasses import dataclass
from pathlib import Path

from pipeline_errors import ValidationError

# Devvit Tools Option Resolver
# The build tool exposes extension options as environment variables:
#   YYEXTOPT_<EXT>_<option>   option values
#   GMEXT_<EXT>_version       extension version
#   YYoutputFolder            freshly built HTML5 bundle
# Lookups are case-insensitive since Windows environments are.

# --- CONFIGURATION ---
DEFAULT_EXTENSION = "Reddit"
DEFAULT_TEMPLATE_URL = "https://github.com/reddit/devvit-template-hello-world.git"
DEFAULT_DISPATCH_EXIT_CODE = 255
DEFAULT_LOG_LEVEL = 2
BUILD_ACTIONS = ("Playtest", "Build", "Upload", "Publish")

PROJECT_NAME_RE = re.compile(r"^[a-z0-9-]{3,16}$")
SUBREDDIT_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")
TRUE_RE = re.compile(r"^(1|true|yes|on)$", re.IGNORECASE)


def normalize_ext_name(name):
    return re.sub(r"[^A-Za-z0-9]", "_", str(name or "")).upper()


def is_valid_project_name(name):
    return bool(PROJECT_NAME_RE.match(str(name or "")))


def is_valid_subreddit_name(name):
    return bool(SUBREDDIT_NAME_RE.match(str(name or "")))


def to_bool(value, default=False):
    if value is None:
        return default
    return bool(TRUE_RE.match(str(value).strip()))


def to_int(value, default=0):
    if value is None:
        return default
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def get_insensitive(environ, key, default=None):
    if key in environ:
        return environ[key]
    lower = key.lower()
    for k, v in environ.items():
        if k.lower() == lower:
            return v
    return default


class ExtensionOptions:
    """Read-only view over one extension's options in an environment mapping."""

    def __init__(self, environ, extension=DEFAULT_EXTENSION):
        self.environ = dict(environ)
        self.extension = extension
        self.ext_key = normalize_ext_name(extension)

    def get(self, option, default=None):
        return get_insensitive(self.environ, f"YYEXTOPT_{self.ext_key}_{option}", default)

    def get_bool(self, option, default=False):
        return to_bool(self.get(option), default)

    def get_int(self, option, default=0):
        return to_int(self.get(option), default)

    def version(self, default=None):
        return get_insensitive(self.environ, f"GMEXT_{self.ext_key}_version", default)

    def list_options(self):
        prefix = f"yyextopt_{self.ext_key.lower()}_"
        # Option names keep their original case after the prefix.
        return {k[len(prefix):]: v for k, v in self.environ.items() if k.lower().startswith(prefix)}


@dataclass(frozen=True)
class PipelineConfig:
    extension: str
    extension_version: str
    output_dir: str
    project_name: str
    source_dir: str
    build_action: str = ""
    subreddit_dev: str = ""
    subreddit_prod: str = ""
    template_url: str = DEFAULT_TEMPLATE_URL
    log_level: int = DEFAULT_LOG_LEVEL
    new_window: bool = True
    wait_for_commands: bool = True
    dispatch_exit_code: int = DEFAULT_DISPATCH_EXIT_CODE

    @property
    def project_dir(self):
        return Path(self.output_dir) / self.project_name

    @property
    def client_dir(self):
        return self.project_dir / "src" / "client"

    @classmethod
    def from_environment(cls, environ, extension=DEFAULT_EXTENSION, overrides=None):
        r"""
        Builds the configuration once from the build tool's environment.
        `overrides` maps field names to values (e.g. from the command line); None values are ignored.
        """
        opts = ExtensionOptions(environ, extension)
        values = {
            "extension": extension,
            "extension_version": opts.version("unknown"),
            "output_dir": (opts.get("outputPath") or "").strip(),
            "project_name": (opts.get("projectName") or "").strip(),
            "source_dir": (get_insensitive(opts.environ, "YYoutputFolder") or "").strip(),
            "build_action": (opts.get("buildAction") or "").strip(),
            "subreddit_dev": (opts.get("subredditDev") or "").strip(),
            "subreddit_prod": (opts.get("subredditProd") or "").strip(),
            "template_url": (opts.get("templateUrl") or "").strip() or DEFAULT_TEMPLATE_URL,
            "log_level": opts.get_int("logLevel", DEFAULT_LOG_LEVEL),
            "new_window": opts.get_bool("newWindow", True),
            "wait_for_commands": opts.get_bool("waitForCommands", True),
            "dispatch_exit_code": opts.get_int("dispatchExitCode", DEFAULT_DISPATCH_EXIT_CODE),
        }
        for k, v in (overrides or {}).items():
            if v is not None:
                values[k] = v

        # CI has no desktop to open windows on.
        if to_bool(get_insensitive(opts.environ, "CI")):
            values["new_window"] = False
        return cls(**values)

    def validate(self):
        r"""
        Raises ValidationError for anything that must be fixed before the pipeline may touch disk.
        Returns a list of non-fatal warnings.
        """
        if not self.output_dir or not self.project_name:
            raise ValidationError("Missing required extension options: 'outputPath' and 'projectName'.")
        if not is_valid_project_name(self.project_name):
            raise ValidationError(
                f"Invalid project name '{self.project_name}': names must be between 3 and 16 characters long, "
                "and can contain lowercase letters, numbers, and hyphens."
            )
        if not self.source_dir:
            raise ValidationError("Build output folder is not set (YYoutputFolder).")
        if not Path(self.source_dir).is_dir():
            raise ValidationError(f"Build output folder not found: {self.source_dir}")

        warnings = []
        if self.subreddit_prod and not is_valid_subreddit_name(self.subreddit_prod):
            warnings.append(f"subredditProd '{self.subreddit_prod}' is not a valid subreddit name.")
        if self.build_action and self.build_action not in BUILD_ACTIONS:
            warnings.append(f"Unknown build action '{self.build_action}'; no command will be run.")
        return warnings
