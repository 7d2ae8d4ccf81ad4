"""Configuration, cancellation and the single-cycle runner."""
