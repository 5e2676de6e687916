"""API route modules for Camp Ecosystem."""
