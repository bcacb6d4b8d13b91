"""Application layer: economy providers, simulation driver and Monte-Carlo runner."""
