# -*- coding: utf-8 -*-
import shutil
import subprocess
import sys

import console_log
from pipeline_errors import CommandError

# Devvit Tools Process Runner
# Runs external programs (git, npm) against a working directory.
#   new_window: open a separate console (Windows only, inline elsewhere)
#   wait:       block until the program exits; False leaves it detached


class ProcessRunner:
    def __init__(self, new_window=False, wait=True, platform=None):
        self.new_window = new_window
        self.wait = wait
        self.platform = platform or sys.platform

    @property
    def uses_new_window(self):
        return self.new_window and self.platform == "win32"

    def build_argv(self, command, args, cwd, title="", wait=True, new_window=None):
        if new_window is None:
            new_window = self.uses_new_window
        if new_window and self.platform == "win32":
            # cmd.exe built-in `start` opens the window; `cmd /c` closes it when done.
            argv = ["cmd.exe", "/c", "start", title]
            if wait:
                argv.append("/wait")
            if cwd:
                argv += ["/D", str(cwd)]
            return argv + ["cmd", "/c", command] + list(args)

        resolved = shutil.which(command)
        if resolved is None:
            raise CommandError(command, args, reason="executable not found on PATH")
        return [resolved] + list(args)

    def run(self, command, args=(), cwd=None, title="", wait=None, new_window=None):
        """`wait` and `new_window` override the runner defaults for a single command."""
        wait = self.wait if wait is None else wait
        args = list(args)
        argv = self.build_argv(command, args, cwd, title, wait, new_window)
        console_log.debug(f"$ {' '.join(argv)} (cwd={cwd})")

        if not wait:
            try:
                subprocess.Popen(argv, cwd=cwd)
            except OSError as e:
                raise CommandError(command, args, reason=str(e)) from e
            console_log.debug(f"Detached: {command}")
            return None

        try:
            res = subprocess.run(argv, cwd=cwd)
        except OSError as e:
            raise CommandError(command, args, reason=str(e)) from e
        if res.returncode != 0:
            raise CommandError(command, args, returncode=res.returncode)
        return res.returncode
