"""Question resolution, artifact generation, merging and execution."""
