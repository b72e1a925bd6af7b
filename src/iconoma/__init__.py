"""Icon catalog studio: lock and config stores, SVG pipeline, and the action queue."""
