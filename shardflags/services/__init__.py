"""Evaluation services: sharding, rules, flags, bandits and the client facade."""
