"""Serve an S3-compatible bucket as a browsable file server."""

__version__ = "1.0.0"
