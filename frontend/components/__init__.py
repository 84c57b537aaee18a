from .cards import CardBuilder
from .charts import ChartBuilder
from .panels import PanelBuilder

__all__ = [
    'CardBuilder',
    'ChartBuilder',
    'PanelBuilder',
]
