"""User-facing interfaces (command line) for kiosksync."""
