"""MakeMKV integration.

This package wraps the ``makemkvcon`` command-line tool: decoding of its
robot-mode output, the per-run session state and async process invocation.
"""
