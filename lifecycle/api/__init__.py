"""HTTP surface of the lifecycle coordinator."""
