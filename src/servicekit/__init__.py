"""
servicekit – shared service toolkit.

Import path convention::

    from servicekit.kernel.errors import ClientError, classify
    from servicekit.resilience.backoff import new_runner, init_backoff, max_calls
    from servicekit.adapters.http import Client, status_ok
    from servicekit.adapters.fastapi import Responder
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
