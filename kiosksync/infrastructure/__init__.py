"""Infrastructure adapters for kiosksync (HTTP transport, observability)."""
