"""Long-running workers: the quorum daemon and its error handling."""
