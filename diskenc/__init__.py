# diskenc - client-side orchestration of disk encryption daemon jobs
from .core.version import VERSION
from .taxonomy import classify

__version__ = VERSION

__all__ = [
    "VERSION",
    "classify",
]
