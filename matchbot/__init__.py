"""
Matchbot - group compatibility bot.

Structure:
- core/      - Application core (config, errors, registry, persistence, connectors)
- common/    - Shared utilities (logging)
- modules/   - Business modules (compat, bot)
"""

__version__ = "1.0.0"
