"""Pure training engines: taxonomy, tiers, volume, progression, deload and plan generation."""
