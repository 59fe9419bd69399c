"""Short links for long URLs."""
