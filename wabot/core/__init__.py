"""Core building blocks: settings, session, storage and connection."""
