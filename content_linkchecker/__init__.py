"""Content link checker: extract, classify, index and reconcile links found in content."""

__version__ = "0.1.0"
