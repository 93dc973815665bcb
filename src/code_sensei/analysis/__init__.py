"""Static analysis producers for Code Sensei."""

from code_sensei.analysis.analyzers import (
    GoAnalyzer,
    PythonAnalyzer,
    RustAnalyzer,
    TypeScriptAnalyzer,
    WhitespaceAnalyzer,
    default_analyzers,
)
from code_sensei.analysis.base import LineRule, StaticAnalyzer
from code_sensei.analysis.complexity import estimate
from code_sensei.analysis.languages import detect_language, is_binary_file
from code_sensei.analysis.security import SecurityScanner

__all__ = [
    "GoAnalyzer",
    "LineRule",
    "PythonAnalyzer",
    "RustAnalyzer",
    "SecurityScanner",
    "StaticAnalyzer",
    "TypeScriptAnalyzer",
    "WhitespaceAnalyzer",
    "default_analyzers",
    "detect_language",
    "estimate",
    "is_binary_file",
]
