"""Multi-document Chatito workspace: incremental validation and dataset export."""

__version__ = "0.1.0"
