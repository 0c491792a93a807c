"""Core scan machinery: size accumulation, progress tracking and the scan engine."""
