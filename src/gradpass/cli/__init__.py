"""Command line interface for door operators."""
