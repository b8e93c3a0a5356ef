"""depotkeeper core — catalog, collections, handler registry and purge service."""
