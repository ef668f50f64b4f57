"""Realtime notification and event distribution core."""
