"""Configuration documents shipped with InspectPilot."""
