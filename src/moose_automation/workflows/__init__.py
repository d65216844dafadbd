"""
Portal Workflows

Credential validation and roster export, plus the shared login steps and
the bounded retry helper they use.
"""

from .export import ExportWorkflow, fallback_filename
from .retry import BoundedRetry, run_bounded
from .validation import CredentialValidationWorkflow

__all__ = [
    "CredentialValidationWorkflow",
    "ExportWorkflow",
    "fallback_filename",
    "BoundedRetry",
    "run_bounded",
]
