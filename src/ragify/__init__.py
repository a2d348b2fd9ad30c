"""Clone a repository and combine its matching files into one Markdown corpus."""

__version__ = "0.1.0"
