"""Domain layer: immutable models for the reward economy."""
