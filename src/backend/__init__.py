"""Backend fetch boundary: configuration, HTTP client and query helpers."""
