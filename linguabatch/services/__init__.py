"""Translation service layer: caches, batching, provider gateway."""
