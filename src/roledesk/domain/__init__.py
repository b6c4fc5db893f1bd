"""Domain layer: entities, services and errors of the permission editor."""
