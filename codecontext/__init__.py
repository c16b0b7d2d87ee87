"""CodeContext: dependency graphs, hotspots and learning paths for source trees."""

__version__ = "0.3.0"
