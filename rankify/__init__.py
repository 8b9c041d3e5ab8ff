"""Rankify: resume review backend built on a hosted auth/file/AI/key-value platform."""

__version__ = "0.1.0"
