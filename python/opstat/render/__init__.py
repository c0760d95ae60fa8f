"""Chart rendering for derived series and rankings."""

from opstat.render.charts import ChartRenderer
from opstat.render.plan import ChartPlanRunner, ChartSpec, default_plan

__all__ = ["ChartRenderer", "ChartPlanRunner", "ChartSpec", "default_plan"]
