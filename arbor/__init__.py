__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'arbor'
__author__ = 'Eiko Reishin (影皇嶺臣)'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from .dispatcher import *
from .faults import *
from .helps import *
from .nodes import *
from .reporting import *
from .resolver import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 0, 0, "final", 0, "")

__all__ = (
    "__path__",
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the dispatcher
__all__ += dispatcher.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the help renderer
__all__ += helps.__all__  # type: ignore[attr-defined]
# Load the exposed API of the nodes
__all__ += nodes.__all__  # type: ignore[attr-defined]
# Load the exposed API of the reporting
__all__ += reporting.__all__  # type: ignore[attr-defined]
# Load the exposed API of the resolver
__all__ += resolver.__all__  # type: ignore[attr-defined]
