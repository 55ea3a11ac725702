"""Load, validate and graph pkg.yaml build definitions and check their sources."""

__version__ = "0.1.0"