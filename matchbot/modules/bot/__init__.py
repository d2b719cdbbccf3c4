"""
Bot - Telegram command surface.

- handlers/  - /add_result, /remove_results, /list_compatibility, /show_result
- routers/   - dispatcher wiring
- services/  - argument parsing, member directory
"""
