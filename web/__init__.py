"""Flask web app for the TV catalog and comparison."""
