"""
Exercise Files Layer.

This package is responsible for all operations on local exercise trees:
locating exercise roots, packing and unpacking archives, and merging
downloaded content while preserving student work.
"""

from .archiver import Archiver, ZipArchiver
from .merge import MergeReport, merge_tree
from .protected import ProtectedPaths
from .root_finder import (
    AnyOfDetector,
    BuildFileDetector,
    ProjectRootFinder,
    RootDetector,
    find_course,
)

__all__ = [
    "AnyOfDetector",
    "Archiver",
    "BuildFileDetector",
    "MergeReport",
    "ProjectRootFinder",
    "ProtectedPaths",
    "RootDetector",
    "ZipArchiver",
    "find_course",
    "merge_tree",
]
