"""Infrastructure adapters: data store and upstream HTTP providers."""
