"""OData query domain: filter expressions, query configuration and paging types."""

from .expressions import *  # noqa: F401,F403
from .query_config import *  # noqa: F401,F403
from .filter_metadata import *  # noqa: F401,F403
from .models import *  # noqa: F401,F403
from .ports import *  # noqa: F401,F403
