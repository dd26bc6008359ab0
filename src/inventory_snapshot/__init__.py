"""Snapshot a content repository and package its inventory with provenance."""
