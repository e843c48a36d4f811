"""corpuslint: cross-document consistency checks and issue baselines."""

__version__ = "0.3.0"
