"""Platform abstraction layer."""

from .detection import (
    Arch,
    Platform,
    PlatformInfo,
    detect,
    is_windows,
)
from .paths import (
    default_cache_dir,
    default_temp_dir,
    prepend_search_path,
)
from .process import (
    ProcessError,
    ProcessRunner,
    SubprocessRunner,
    run,
    which,
)

__all__ = [
    # detection
    "Arch",
    "Platform",
    "PlatformInfo",
    "detect",
    "is_windows",
    # paths
    "default_cache_dir",
    "default_temp_dir",
    "prepend_search_path",
    # process
    "ProcessError",
    "ProcessRunner",
    "SubprocessRunner",
    "run",
    "which",
]
