"""Settings, errors, security and small shared helpers."""
