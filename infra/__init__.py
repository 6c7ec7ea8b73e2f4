"""Configuration, logging, path conventions and filesystem walking."""
