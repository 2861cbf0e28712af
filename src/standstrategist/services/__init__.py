"""Host-side services: event bus, autosave, registry, session and operations."""
