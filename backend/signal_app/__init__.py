"""Host application: settings, per-entity engine registry, snapshot storage and HTTP API."""
