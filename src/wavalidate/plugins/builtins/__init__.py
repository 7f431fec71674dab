"""Plugins shipped with wavalidate."""
