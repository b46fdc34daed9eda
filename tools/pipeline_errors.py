# -*- coding: utf-8 -*-

# Devvit Tools Error Taxonomy
# Every fatal condition raised by a pipeline stage derives from PipelineError.


class PipelineError(Exception):
    """Base class for conditions that abort the pipeline."""


class ValidationError(PipelineError):
    """Missing or malformed options, reported before anything touches disk."""


class MissingInputError(PipelineError):
    """A required input (entry HTML, loader tag) is absent."""


class CommandError(PipelineError):
    def __init__(self, command, args=(), returncode=None, reason=None):
        self.command = command
        self.args_list = list(args)
        self.returncode = returncode
        line = " ".join([command] + self.args_list)
        if reason:
            message = f"{line} -> {reason}"
        else:
            message = f"{line} -> exit {returncode}"
        super().__init__(message)
