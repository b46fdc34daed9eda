#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import argparse
import os
import sys

from rich.markup import escape

import build_transplant
import console_log
import devvit_scaffolder
import index_patcher
import placeholder_expander
from extension_options import DEFAULT_EXTENSION, ExtensionOptions, PipelineConfig
from pipeline_errors import PipelineError
from process_runner import ProcessRunner

# Devvit Tools Pipeline
# Post-build step for the Reddit extension: turns an HTML5 export into a Devvit app.
#   options -> validate -> scaffold -> transplant -> patch -> expand -> npm install -> action

# --- CONFIGURATION ---
NAME_PLACEHOLDER = "<% name %>"
LOCKFILE = "package-lock.json"

# action: (npm script, log line, window title)
BUILD_ACTIONS = {
    "Playtest": ("dev", "Uploading and starting playtest...", "Starting playtest..."),
    "Build": ("build", "Building client and server projects...", "Building projects..."),
    "Upload": ("deploy", "Uploading new version of the application...", "Uploading application..."),
    "Publish": ("launch", "Publishing application for review...", "Publishing application..."),
}

NEXT_STEPS = [
    ("npm run dev", "starts a development server where you can develop your application live on Reddit."),
    ("npm run build", "builds your client and server projects."),
    ("npm run deploy", "uploads a new version of your app."),
    ("npm run launch", "publishes your app for review."),
]


def make_runner(config):
    return ProcessRunner(new_window=config.new_window, wait=config.wait_for_commands)


def install_dependencies(project_dir, runner):
    has_lock = (project_dir / LOCKFILE).exists()
    console_log.info("Installing dependencies...")
    runner.run("npm", ["ci" if has_lock else "i"], cwd=str(project_dir), title="Installing npm dependencies", wait=True)
    console_log.info("Dependencies ready.")


def print_next_steps(project_dir):
    lines = [f"[bold]Folder:[/bold] {escape(str(project_dir))}", "", "[bold]Next steps:[/bold]"]
    for cmd, desc in NEXT_STEPS:
        lines.append(f"  [cyan]{cmd}[/cyan] -> {desc}")
    console_log.info("Project ready:")
    console_log.panel("\n".join(lines), title="Devvit Project")


def dispatch_build_action(action, project_dir, runner):
    r"""
    Runs the package script mapped to `action`. Unknown or empty actions only
    print the available commands. Returns the npm script that was run, if any.
    """
    entry = BUILD_ACTIONS.get(action)
    if entry is None:
        print_next_steps(project_dir)
        return None

    script, message, title = entry
    console_log.info(message)
    runner.run("npm", ["run", script], cwd=str(project_dir), title=title)
    if action == "Playtest":
        console_log.info("Playtest started. Refresh your subreddit page.")
    return script


def run_pipeline(config, runner=None):
    r"""
    Executes every stage in order for an already-built configuration.
    Any stage failure raises PipelineError and nothing after it runs.
    Returns the process exit code for the dispatch branch.
    """
    runner = runner or make_runner(config)

    console_log.info(f"{config.extension} extension version: {config.extension_version}")
    for warning in config.validate():
        console_log.warn(warning)
    console_log.debug(f"Configuration: {config}")

    # 1. Scaffold (no-op when devvit.json exists)
    project_dir = devvit_scaffolder.ensure_project(
        config.output_dir, config.project_name, config.template_url,
        dev_subreddit_hint=config.subreddit_dev, runner=runner,
    )

    # 2. Replace previous client build
    client_dir = config.client_dir
    build_transplant.clean_client_output(client_dir)
    index_path = build_transplant.transplant(config.source_dir, client_dir)

    # 3. Patch entry point
    index_patcher.patch_entry_point(index_path)

    # 4. Expand template placeholder if the template still carries it
    placeholder_expander.expand_placeholder(project_dir, NAME_PLACEHOLDER, config.project_name)

    # 5. Dependencies
    install_dependencies(project_dir, runner)

    # 6. Post-build action
    dispatch_build_action(config.build_action, project_dir, runner)
    return config.dispatch_exit_code


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Devvit post-build pipeline for HTML5 exports")
    parser.add_argument("--extension", default=DEFAULT_EXTENSION, help="Extension whose options are read")
    parser.add_argument("--output-path", dest="output_dir")
    parser.add_argument("--project-name")
    parser.add_argument("--build-action", choices=list(BUILD_ACTIONS) + [""])
    parser.add_argument("--source-dir")
    parser.add_argument("--subreddit-dev")
    parser.add_argument("--template-url")
    parser.add_argument("--log-level", type=int)
    parser.add_argument("--inline", action="store_true", help="Run commands in this console and wait for them")
    return parser.parse_args(argv)


def main(argv=None, environ=None):
    args = parse_args(argv)
    overrides = {
        "output_dir": args.output_dir,
        "project_name": args.project_name,
        "build_action": args.build_action,
        "source_dir": args.source_dir,
        "subreddit_dev": args.subreddit_dev,
        "template_url": args.template_url,
        "log_level": args.log_level,
    }
    if args.inline:
        overrides.update(new_window=False, wait_for_commands=True)

    environ = os.environ if environ is None else environ
    config = PipelineConfig.from_environment(environ, args.extension, overrides)
    console_log.set_level(config.log_level)
    for key, value in ExtensionOptions(environ, args.extension).list_options().items():
        console_log.debug(f"Option {key} = {value}")

    try:
        code = run_pipeline(config)
    except PipelineError as e:
        console_log.error(str(e))
        return 1
    except Exception as e:
        console_log.error(f"{e.__class__.__name__}: {e}")
        return 1
    return code


if __name__ == "__main__":
    sys.exit(main())
