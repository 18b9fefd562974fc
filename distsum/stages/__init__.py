"""Pipeline stages run before the build output is uploaded."""

from distsum.stages.base import BaseStage, StageExecutionError
from distsum.stages.fix_packages import FixPackagesStage
from distsum.stages.save_checksums import SaveChecksumsStage

DEFAULT_STAGES: tuple[type[BaseStage], ...] = (SaveChecksumsStage, FixPackagesStage)

__all__ = [
    "BaseStage",
    "DEFAULT_STAGES",
    "FixPackagesStage",
    "SaveChecksumsStage",
    "StageExecutionError",
]
