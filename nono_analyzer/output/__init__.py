"""Output formatters for nono-analyzer."""

from nono_analyzer.output.check_json import CheckJsonFormatter, VerifyJsonFormatter
from nono_analyzer.output.check_markdown import (
    CheckMarkdownFormatter,
    VerifyMarkdownFormatter,
)
from nono_analyzer.output.terminal import TerminalFormatter

__all__ = [
    "CheckJsonFormatter",
    "CheckMarkdownFormatter",
    "TerminalFormatter",
    "VerifyJsonFormatter",
    "VerifyMarkdownFormatter",
]
