"""Offline replay of recorded price series through the signal engine."""
