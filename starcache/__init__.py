"""starcache: read-through SWAPI cache with static-snapshot fallback."""

__version__ = "1.0.0"
