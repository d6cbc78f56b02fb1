"""Output formatting: Rich rendering for humans, JSON for machines."""
