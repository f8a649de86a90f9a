"""
Feature modules for the BaaS emulator.

Each module is self-contained with its own:
- interfaces.py: Protocol definitions for the module's public API
- models.py: Pydantic models for data transfer
- service.py: Emulator implementation
- exceptions.py: Module-specific exceptions

Modules communicate through interfaces, not concrete implementations.
The client module composes the others into a single facade.
"""
