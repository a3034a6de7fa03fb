"""Status API: health, live tally and Prometheus metrics."""
