"""Runtime configuration for gradpass."""
