"""Power planning engine for rackfeed."""
