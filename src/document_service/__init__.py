"""Document Service: markdown and LaTeX document storage with snapshot persistence."""

__version__ = "1.0.0"
