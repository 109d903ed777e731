"""panic-triage package."""

from .aggregate import Similarity, aggregate
from .config import ConfigOverrides, TriageConfig, load_effective_config
from .pipeline import analyze
from .source import SourceCache, augment
from .stack import Bucket, Context, MalformedDumpError, NoDumpFound, parse_dump

__all__ = [
    "Bucket",
    "ConfigOverrides",
    "Context",
    "MalformedDumpError",
    "NoDumpFound",
    "Similarity",
    "SourceCache",
    "TriageConfig",
    "aggregate",
    "analyze",
    "augment",
    "load_effective_config",
    "parse_dump",
]

__version__ = "0.1.0"
