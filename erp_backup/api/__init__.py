"""HTTP API for the backup engine."""
