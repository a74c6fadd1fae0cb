"""Task tools for an AI caller (OpenAI function-calling format)."""
