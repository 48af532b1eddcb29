"""Publish front-matter annotated Markdown documents to BookStack pages."""

__version__ = "0.3.0"
