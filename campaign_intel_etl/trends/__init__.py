"""Trend and entity velocity engine."""
