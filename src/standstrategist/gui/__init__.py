"""Optional Qt integration (requires the ``gui`` extra)."""
