"""Import rewriter layer."""

from workspace_convert.rewriter.import_rewriter import (
    ImportRewriter,
    apply_references,
    iter_rewrite_targets,
    resolve_qualified,
    rewrite_imports,
)
from workspace_convert.rewriter.import_scanner import compile_import_pattern, find_specifiers

__all__ = [
    "ImportRewriter",
    "apply_references",
    "compile_import_pattern",
    "find_specifiers",
    "iter_rewrite_targets",
    "resolve_qualified",
    "rewrite_imports",
]
