"""HTTP API for svntag."""
