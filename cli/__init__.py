"""Command-line interface for block map builds."""
