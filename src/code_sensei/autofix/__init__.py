"""Auto-fix support for whitelisted rules."""

from code_sensei.autofix.fixer import AutoFixer, FixResult

__all__ = ["AutoFixer", "FixResult"]
