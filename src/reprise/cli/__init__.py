"""Command-line interface for inspecting and cleaning recordings."""
