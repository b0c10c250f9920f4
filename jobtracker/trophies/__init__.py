"""Trophy catalog, persistence and reconciliation."""
