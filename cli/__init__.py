"""script-sources command line interface."""
