"""Infrastructure layer — database schema, scoped transactions, repositories."""
