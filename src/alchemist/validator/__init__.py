from alchemist.validator.report import build_report, save_report
from alchemist.validator.validator import build_run_index, validate_all, validate_dataset

__all__ = ["build_report", "build_run_index", "save_report", "validate_all", "validate_dataset"]
