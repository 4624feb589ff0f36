"""Export of derived geometry (plan renders)."""
