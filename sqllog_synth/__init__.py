"""
sqllog-synth - synthetic SQL audit log generator.

Produces high volumes of plausible database audit records (SQL execution
logs) for load testing and fixtures.
"""

__version__ = "0.1.0"
