"""Core workflow management.

This module contains the run workflow that ties disc detection, ripping
and drive control together for one batch of discs.
"""
