"""projctl: project descriptor client over an asynchronous file service."""

__version__ = "0.1.0"
