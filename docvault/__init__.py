"""DocVault - HTTP facade over a history-keeping document store."""

__version__ = "1.0.0"
