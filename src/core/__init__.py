"""Core configuration, types, errors, and logging shared by all layers."""
