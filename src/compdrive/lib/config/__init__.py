"""Driver settings and project configuration loading."""
