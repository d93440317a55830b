"""Shared utilities for all pipeline stages."""
