"""Logging helpers for tweenline."""
