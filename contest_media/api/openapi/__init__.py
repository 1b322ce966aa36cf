"""OpenAPI (REST) surface."""
