"""Graph containers, I/O and numeric helpers used by the flow algorithms."""
