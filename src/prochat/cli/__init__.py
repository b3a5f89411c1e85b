"""Command-line entry points for prochat."""
