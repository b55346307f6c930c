"""Assembly and validation engines."""
