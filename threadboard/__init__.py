"""Threadboard: discussion board backend with a thread/reply consistency engine."""
