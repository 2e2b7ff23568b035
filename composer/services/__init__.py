"""IO-adjacent services around the kernel: entry store, cache, sync, composition."""
