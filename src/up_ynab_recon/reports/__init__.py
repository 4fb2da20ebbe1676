"""Balance projection and report output."""
