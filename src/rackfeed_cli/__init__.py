"""Command line entry points for rackfeed."""
