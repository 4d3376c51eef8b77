"""Short-form video hook generator."""
