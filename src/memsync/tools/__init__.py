"""Tool-facing operations over the memory store, presets and sync manager."""
