from .api import clear_all as clear_all
from .api import clear_one as clear_one
from .api import load_many as load_many
from .api import load_one as load_one
from .api import prime as prime
from .api import start as start
from .api import stop as stop
from .container import Container as Container
from .exceptions import BatchLengthMismatchError as BatchLengthMismatchError
from .exceptions import BufferOverflowError as BufferOverflowError
from .exceptions import LoaderClosedError as LoaderClosedError
from .exceptions import TakoError as TakoError
from .loader import Loader as Loader
from .options import LoaderOptions as LoaderOptions

__all__ = [
    "start",
    "stop",
    "load_one",
    "load_many",
    "clear_one",
    "clear_all",
    "prime",
    "Loader",
    "LoaderOptions",
    "Container",
    "TakoError",
    "LoaderClosedError",
    "BufferOverflowError",
    "BatchLengthMismatchError",
]
