"""Role/permission authorization engine for the admin dashboard backend."""
