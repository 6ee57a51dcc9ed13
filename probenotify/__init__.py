"""Alert notification for probe targets that keep failing."""
