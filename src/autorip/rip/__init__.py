"""Rip job orchestration and output folder handling."""
