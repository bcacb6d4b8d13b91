"""Domain layer: models and tax calculators."""
