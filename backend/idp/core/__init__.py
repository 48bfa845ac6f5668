"""Cross-cutting infrastructure: logging and startup."""
