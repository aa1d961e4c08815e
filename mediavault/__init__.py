"""MediaVault: content gateway for a personal movie and manga library."""
