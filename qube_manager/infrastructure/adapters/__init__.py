"""Infrastructure adapters: file-backed implementations of the ports."""
