"""clipvault: clipboard history with pinned and favorite entries."""

__version__ = "0.1.0"
