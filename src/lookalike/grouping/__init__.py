"""Similarity grouping across an image collection."""

from .cluster import Group, cluster_groups
from .engine import GroupingEngine, GroupingResult, ProgressEvent, find_groups

__all__ = [
    "Group",
    "cluster_groups",
    "GroupingEngine",
    "GroupingResult",
    "ProgressEvent",
    "find_groups",
]
