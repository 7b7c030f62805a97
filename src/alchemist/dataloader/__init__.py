from alchemist.dataloader.config_loader import ConfigLoader
from alchemist.dataloader.postload_handler import LoadResultHandler
from alchemist.dataloader.records_loader import RecordsLoader
from alchemist.dataloader.types import LoadResult

__all__ = ["ConfigLoader", "LoadResult", "LoadResultHandler", "RecordsLoader"]
