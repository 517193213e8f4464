"""Retrieval-augmented summarization of medical diagnostic reports."""

__version__ = "0.1.0"
