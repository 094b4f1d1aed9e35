"""Command-line harness that runs one processing script over synthetic flow files."""

__version__ = "1.0.0"
