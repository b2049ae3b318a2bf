"""Infrastructure layer: static config, balance config manager, logging."""
