"""Exceptions raised by the conversion pipeline."""

from __future__ import annotations

from pathlib import Path


class ConversionError(Exception):
    """Base class for every fatal conversion failure."""


class DiscoveryError(ConversionError):
    """A package tree or manifest could not be read."""


class DuplicateExportError(DiscoveryError):
    """Two files in one package map to the same export key."""

    def __init__(self, package: str, key: str, first: str, second: str):
        self.package = package
        self.key = key
        super().__init__(
            f"Package {package!r}: export key {key!r} is produced by both "
            f"{first} and {second}"
        )


class AnalyzerError(ConversionError):
    """The external module graph analyzer failed or returned bad output."""


class DependencyCycleError(ConversionError):
    def __init__(self, cycle: list[str]):
        self.cycle = cycle
        super().__init__("Package dependency cycle: " + " -> ".join(cycle))


class ResolutionError(ConversionError):
    """An import resolves outside every known package."""

    def __init__(self, file: Path, specifier: str, reason: str = "outside any known package"):
        self.file = file
        self.specifier = specifier
        super().__init__(f"{file}: import {specifier!r} resolves {reason}")
