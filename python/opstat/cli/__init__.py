"""Command line interface for opstat."""
