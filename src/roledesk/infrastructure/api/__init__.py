"""HTTP API for RoleDesk."""
