"""Command-line interface for the configuration agent."""
