"""
Service layer for the signalset editor.

This package contains service classes that orchestrate the pure document
functions, separating editor state handling from any presentation layer.

Services:
- EditSession: Raw text / structured document synchronization with copy-on-write edits
- DbcExportService: Export of signalsets as DBC text and cantools databases
"""

from signalset_editor.services.edit_session import EditSession
from signalset_editor.services.dbc_export_service import DbcExportService

__all__ = ['EditSession', 'DbcExportService']
