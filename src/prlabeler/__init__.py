"""prlabeler - label pull requests from declarative YAML rules."""

__version__ = "0.1.0"
