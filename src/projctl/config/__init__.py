"""Configuration: settings sources, TOML models, logging setup."""
