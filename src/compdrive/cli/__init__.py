"""Command-line surface for compdrive."""
