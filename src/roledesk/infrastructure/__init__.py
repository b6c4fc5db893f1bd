"""Infrastructure layer: persistence and HTTP API for RoleDesk."""
