"""encguard: encrypted content pre-filter for upload screening pipelines."""

__version__ = "0.1.0"
