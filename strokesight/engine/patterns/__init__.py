"""Composite-pattern matchers. Each module registers itself on import."""
