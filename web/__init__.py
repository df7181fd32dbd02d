"""HTTP adapter for the CHIP-8 runner."""
