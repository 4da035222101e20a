"""Infrastructure adapters: logging, module loading, input parsing and Graph access."""
