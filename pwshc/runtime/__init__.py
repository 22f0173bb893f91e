"""In-process execution of compiled plans."""

from .executor import PlanExecutor, run_markup

__all__ = ["PlanExecutor", "run_markup"]
