"""Adapters binding the domain to feeds and storage."""
