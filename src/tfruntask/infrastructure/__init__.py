"""Infrastructure layer: configuration, HTTP clients, storage and stage handlers."""
