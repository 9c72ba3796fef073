"""Core services for dirinv: paths, configuration, theme and session wiring."""
