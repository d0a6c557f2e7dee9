"""Command-line runner for workout exports."""
