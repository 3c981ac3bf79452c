"""subdeck - content, social and media back office API."""
