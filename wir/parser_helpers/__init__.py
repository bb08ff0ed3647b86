from .images import *
from .worklist import *
