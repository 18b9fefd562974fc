"""distsum command-line interface."""
