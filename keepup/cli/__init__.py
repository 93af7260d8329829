"""CLI module for keepup.

Options can be given as arguments or through environment variables.
"""

from .main import (
    Config,
    build_config,
    cli,
    evaluate_boolean,
    initialize_sentry,
    main,
)

__all__ = [
    "cli",
    "main",
    "Config",
    "build_config",
    "evaluate_boolean",
    "initialize_sentry",
]
