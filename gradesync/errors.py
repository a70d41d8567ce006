"""Exception types raised by the synchronization engine."""


class GradeSyncError(Exception):
    """Base class for every engine error."""


class EmptySourceError(GradeSyncError):
    """The source file produced no usable student records."""


class TemplateReadError(GradeSyncError):
    """The template could not be parsed as a workbook."""


class NoMatchError(GradeSyncError):
    """No student id was found in any sheet of the template."""


class WriteError(GradeSyncError):
    """Writing grades into the template failed."""
