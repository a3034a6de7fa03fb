"""Bootstrap wiring: singletons shared by the daemon and the status API."""
