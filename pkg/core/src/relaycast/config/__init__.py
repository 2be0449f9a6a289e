"""Static defaults for the relay engine."""
