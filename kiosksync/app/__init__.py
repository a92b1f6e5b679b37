"""Application wiring: configuration and published event types."""
