"""Packaging pipeline.

`build_package` ties the finding-aid resolver, the derivative planner, the job
queue and the structural metadata builder together for one submission.
"""

from .builder import PackageLayout, PackageResult, build_package
from .discovery import FileDiscovery, MimetypesDiscovery

__all__ = [
    "FileDiscovery",
    "MimetypesDiscovery",
    "PackageLayout",
    "PackageResult",
    "build_package",
]
