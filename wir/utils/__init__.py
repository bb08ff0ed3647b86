from .httpx import *
