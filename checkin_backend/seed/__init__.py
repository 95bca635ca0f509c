# __init__.py
# Imports the seed entry point for easy batch seeding.

from .seed_all import seed_all, seed_teams, seed_events
