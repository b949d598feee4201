"""Services package - attachment extraction and note capture."""
