"""Dialect connectors and formatting tables for tabunload."""
