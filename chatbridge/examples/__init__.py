"""Runnable chatbridge examples."""
