"""Domain layer: entities, reconciliation rules and ports."""
