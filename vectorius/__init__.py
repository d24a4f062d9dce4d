"""Vectorius tutoring chat backend."""
