"""Domain layer: models and services with no I/O."""
