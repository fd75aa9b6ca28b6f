"""Command line interface for echopan."""
