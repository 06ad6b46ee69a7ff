"""HTTP layer: router composition, middleware and exception handlers."""
