"""semrel: commit-driven semantic release orchestration."""

__version__ = "0.1.0"
