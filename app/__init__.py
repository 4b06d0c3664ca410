"""Application package exposing the shared FunctionApp instance.

The FunctionApp is configured with FUNCTION-level authentication so every
route requires a function key unless it explicitly opts out.
"""

from __future__ import annotations

import azure.functions as func

app = func.FunctionApp(http_auth_level=func.AuthLevel.FUNCTION)

# Import route modules so decorators execute at import time
from .routes import docs as _docs_routes  # noqa: F401,E402
from .routes import identifiers as _identifier_routes  # noqa: F401,E402
from .routes import rules as _rule_routes  # noqa: F401,E402

__all__ = ["app"]
