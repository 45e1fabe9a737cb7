"""
Utility helpers used by the migration tool.

This subpackage exposes convenience functions for logging, structured event
reports, checkpoint files and export field coercion.
"""

from .checkpoints import Checkpoint, CheckpointError, CheckpointStore
from .errors import ERRORS, report_error, report_ok
from .fields import convert_to_iso_date, parse_float, parse_int, slugify_title
from .logs import log_message

__all__ = [
    "Checkpoint",
    "CheckpointError",
    "CheckpointStore",
    "ERRORS",
    "report_error",
    "report_ok",
    "convert_to_iso_date",
    "parse_float",
    "parse_int",
    "slugify_title",
    "log_message",
]
