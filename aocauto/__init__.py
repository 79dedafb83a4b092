from . import answers
from . import examples
from . import exceptions
from . import interact
from . import models
from . import progress
from . import responses
from . import runner
from . import solver
from . import submit
from . import types
from . import utils
from .exceptions import AocError
from .runner import Automaton
from .solver import Solver
from .version import __version__

__all__ = [
    "AocError",
    "Automaton",
    "Solver",
    "answers",
    "examples",
    "exceptions",
    "interact",
    "models",
    "progress",
    "responses",
    "runner",
    "solver",
    "submit",
    "types",
    "utils",
]
