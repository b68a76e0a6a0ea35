"""vcxsln - Read Visual Studio solutions and C++ projects into a Python model."""

from vcxsln.config import LoadConfig, Project, Solution
from vcxsln.loader import load_solution
from vcxsln.msbuild.evaluator import evaluate

__version__ = "0.1.0"
__all__ = ["LoadConfig", "Project", "Solution", "evaluate", "load_solution"]
