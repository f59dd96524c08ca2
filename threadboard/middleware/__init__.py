"""Request middleware helpers."""
