"""Infrastructure adapters: orchestrator HTTP, filesystem and logging."""
