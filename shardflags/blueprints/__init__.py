"""HTTP blueprints of the ShardFlags service."""
