"""Models, loaders and plan validation for rackfeed."""
