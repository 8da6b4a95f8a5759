"""CLI for inspecting address pools."""
