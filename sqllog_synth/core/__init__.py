"""
Core generation pipeline: SQL synthesis, hashing, connection sessions,
workers and record sinks.
"""
