from .client import SheetClient
from .csv_export import CsvExportSource

__all__ = ['SheetClient', 'CsvExportSource']
