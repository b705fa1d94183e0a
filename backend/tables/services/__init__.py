"""
Services for the tables app.

- TableStatusService: Available / Ongoing / Closed, derived on every read
- TableShiftService: move a table's lines, open bill and tickets elsewhere
"""

from .table_status_service import TableStatus, TableStatusService
from .table_shift_service import TableShiftService

__all__ = ['TableStatus', 'TableStatusService', 'TableShiftService']
