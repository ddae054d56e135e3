"""Command line interface for shapeguard."""
