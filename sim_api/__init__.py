"""HTTP simulation endpoint for the assumption-tuning UI."""
