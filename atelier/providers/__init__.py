"""External provider capabilities: model calls and vision file uploads."""
