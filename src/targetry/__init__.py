"""targetry - Declare build targets and run them in dependency order."""

__version__ = "0.1.0"

from .context import Context as Context
from .engine import Engine as Engine
from .engine import Outcome as Outcome
from .engine import RunResult as RunResult
from .engine import TargetResult as TargetResult
from .errors import ConfigurationError as ConfigurationError
from .errors import CyclicDependencyError as CyclicDependencyError
from .errors import DuplicateTargetError as DuplicateTargetError
from .errors import MissingParameterError as MissingParameterError
from .errors import RunError as RunError
from .errors import TargetExecutionError as TargetExecutionError
from .errors import TargetryError as TargetryError
from .errors import UnknownActionError as UnknownActionError
from .errors import UnknownTargetError as UnknownTargetError
from .params import Parameter as Parameter
from .params import Parameters as Parameters
from .registry import Registry as Registry
from .target import Target as Target
from .target import action as action
from .workspace import Workspace as Workspace
