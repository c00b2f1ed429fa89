"""
Utility functions and helpers.

This package contains reusable utilities for running commands, file
operations, redaction and template rendering.

Modules:
- command: Logged subprocess execution with accepted return codes
- files: Directory and file helpers, including SHA256 digests of downloads
- redact: Secret redaction for logged commands
- templates: Jinja2 template loading
"""
