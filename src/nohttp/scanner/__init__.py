"""File resolution, line scanning and the scan engine."""
