"""Analysis layer: module graph loading and package ordering."""

from workspace_convert.analysis.dependency_graph import (
    DependencyGraphBuilder,
    PackageLocator,
    topological_order,
)
from workspace_convert.analysis.module_graph import (
    ModuleGraphLoader,
    SubprocessModuleGraphLoader,
    parse_module_graph,
)

__all__ = [
    "DependencyGraphBuilder",
    "ModuleGraphLoader",
    "PackageLocator",
    "SubprocessModuleGraphLoader",
    "parse_module_graph",
    "topological_order",
]
