"""workspace-convert: turn a flat module tree into a multi-package workspace."""

__version__ = "0.1.0"
