"""Repository inspection."""
