"""
Modules - Business modules.

- compat/  - Matchup cache and compatibility listing
- bot/     - Telegram command handlers
"""
