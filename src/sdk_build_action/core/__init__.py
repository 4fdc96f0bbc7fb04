"""Configuration, data model and errors shared by every layer."""
