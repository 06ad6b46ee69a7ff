"""Core package: DDD building blocks, logging, wiring and lifecycle."""
