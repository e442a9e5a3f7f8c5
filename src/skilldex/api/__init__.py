"""HTTP host for discovery and invocation."""
