"""abtest-admin - configuration validator for persona-targeted A/B tests.

Builds, checks and launches A/B tests for a persona x journey-stage
personalized website, and manages admin preview overrides.
"""

__version__ = "0.1.0"

from .core import *
from .config import *
from .experiments import *
from .preview import *

__all__ = [
    # Version info
    "__version__",

    # Main components
    "ABTestWizard",
    "VariantSetManager",
    "TargetingSelector",
    "is_ready",
    "AdminPreviewState",
    "ConfigManager",
    "Settings",
]
