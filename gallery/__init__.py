"""Card Gallery API."""
