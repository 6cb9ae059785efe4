"""Built-in components shipped with idiolint."""
