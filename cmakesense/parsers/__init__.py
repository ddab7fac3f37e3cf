"""Language front ends used by the completion engine."""
