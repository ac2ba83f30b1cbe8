"""Feature modules: auth, profiles, realtime."""
