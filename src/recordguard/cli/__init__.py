"""Command-line interface for recordguard."""
