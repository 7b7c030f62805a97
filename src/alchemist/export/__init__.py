from alchemist.export.records_export import write_records_csv

__all__ = ["write_records_csv"]
