"""quickfuzz - per-command path lists with fzf selection."""

__version__ = "1.0.0"
