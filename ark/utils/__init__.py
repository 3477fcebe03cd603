"""Shared utilities for Ark."""
