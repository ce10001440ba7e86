"""Pure policy services used by the session controller."""
