"""Pod Watcher - tears down pods whose critical containers have exited."""

__version__ = "0.1.0"
