"""Custom graphics widgets."""
