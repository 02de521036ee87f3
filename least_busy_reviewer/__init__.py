"""least-busy-reviewer - assign the pull request reviewer with the lightest workload."""

__version__ = "0.1.0"
