"""HTTP layer exposing the inspection pipeline."""
