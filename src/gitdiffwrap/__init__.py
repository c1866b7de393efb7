"""gitdiffwrap: show git diffs in an external comparison tool."""

__version__ = "1.0.0"
