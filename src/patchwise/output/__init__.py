"""Reporters for patch results."""
