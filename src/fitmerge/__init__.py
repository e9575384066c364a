"""Top-level package for fitmerge.

fitmerge splices the position, altitude, distance and speed recorded by one
or more secondary FIT recordings into a primary FIT recording, recomputing
lap and session totals so they agree with the spliced data.
"""

from ._version import __version__
from .errors import ErrorKind, MergeError
from .fusion import FusionEngine, FusionState, fuse
from .merge import (
    MergeRequest,
    MergeResult,
    MergeSettings,
    MergeSummary,
    default_output_path,
    merge_files,
    notify,
    run_merge,
)
from .secondary import Sample, SecondaryCollection, SecondaryDataset, extract_dataset

__all__ = [
    "ErrorKind",
    "FusionEngine",
    "FusionState",
    "MergeError",
    "MergeRequest",
    "MergeResult",
    "MergeSettings",
    "MergeSummary",
    "Sample",
    "SecondaryCollection",
    "SecondaryDataset",
    "default_output_path",
    "extract_dataset",
    "fuse",
    "merge_files",
    "notify",
    "run_merge",
    "__version__",
]
