"""modules/reoptimization — criterion-driven revision of generated itineraries."""

from modules.reoptimization.local_repair import InvariantChecker, LocalRepair
from modules.reoptimization.execution_gate import ExecutionGate
from modules.reoptimization.transforms import TRANSFORMS, BaseTransform, TransformContext
from modules.reoptimization.optimizer import Optimizer
from modules.reoptimization.alternative_generator import (
    AlternativeGenerator, AlternativeOption, ALTERNATIVE_KINDS,
)

__all__ = [
    "InvariantChecker",
    "LocalRepair",
    "ExecutionGate",
    "TRANSFORMS",
    "BaseTransform",
    "TransformContext",
    "Optimizer",
    "AlternativeGenerator",
    "AlternativeOption",
    "ALTERNATIVE_KINDS",
]
