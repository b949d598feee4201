"""Core package - configuration, logging and database wiring."""
