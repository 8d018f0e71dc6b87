"""Sawasdee review scheduler: SM-2 spaced repetition over a key-value blob."""

__version__ = "0.1.0"
