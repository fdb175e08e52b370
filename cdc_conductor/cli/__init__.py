"""Command line interface for cdc-conductor."""
