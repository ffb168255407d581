"""Session exporters."""

from sleuth.export.csv_exporter import CsvExporter
from sleuth.export.protocols import Exporter, NullExporter

__all__ = ["Exporter", "NullExporter", "CsvExporter"]
