"""Escape room domain services: session timer, progress, codes and scores.

This package contains pure(ish) domain logic that should be imported by
HTTP routes and socket handlers, keeping transport concerns separated
from the puzzle progression state machine.
"""
