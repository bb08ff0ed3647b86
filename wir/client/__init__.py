from .connection import *
