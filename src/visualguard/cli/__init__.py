"""Command-line interface for VisualGuard."""
