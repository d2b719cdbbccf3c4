"""
Core - Application infrastructure.

- config/       - Settings from environment
- registry/     - Guild/user/headmate data model and locked store
- persistence/  - Registry file writes and tiered backups
- connectors/   - External service clients (score service)
- errors.py     - Error taxonomy
"""
