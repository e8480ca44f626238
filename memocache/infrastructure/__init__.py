"""Infrastructure layer: cache store adapters and store exceptions."""
