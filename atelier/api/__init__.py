"""HTTP surface for the conversation core."""
