"""Configuration, persistence plumbing, security and errors."""
