"""
modules/reoptimization/transforms package — one transform per optimization criterion.
"""
from modules.reoptimization.transforms.base import BaseTransform, TransformContext
from modules.reoptimization.transforms.budget import BudgetTransform
from modules.reoptimization.transforms.local import LocalTransform
from modules.reoptimization.transforms.maximize import MaximizeTransform
from modules.reoptimization.transforms.route import RouteTransform
from modules.reoptimization.transforms.views import ViewsTransform
from modules.reoptimization.transforms.walking import WalkingTransform
from modules.reoptimization.transforms.weather import WeatherTransform

# criterion → transform class
TRANSFORMS: dict[str, type[BaseTransform]] = {
    cls.criterion: cls
    for cls in (
        RouteTransform,
        WeatherTransform,
        BudgetTransform,
        WalkingTransform,
        ViewsTransform,
        MaximizeTransform,
        LocalTransform,
    )
}

__all__ = [
    "BaseTransform",
    "TransformContext",
    "TRANSFORMS",
    "RouteTransform",
    "WeatherTransform",
    "BudgetTransform",
    "WalkingTransform",
    "ViewsTransform",
    "MaximizeTransform",
    "LocalTransform",
]
