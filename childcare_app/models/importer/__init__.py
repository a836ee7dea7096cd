from .schema import ImportRun, ImportRunStatus

__all__ = ["ImportRun", "ImportRunStatus"]
